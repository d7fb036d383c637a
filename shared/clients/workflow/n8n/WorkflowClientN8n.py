import httpx

from shared.clients.workflow.WorkflowClientInterface import WorkflowClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.ingest import IngestDocument


class WorkflowClientN8n(WorkflowClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._query_url = self.get_config_val("QUERY_URL", default=None, val_type="string")
        self._ingest_url = self.get_config_val("INGEST_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._api_key_header = self.get_config_val("API_KEY_HEADER", default="X-API-Key", val_type="string")
        self._channel = self.get_config_val("CHANNEL", default="qa-form", val_type="string")
        self._user = self.get_config_val("USER", default="form-user", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "N8n"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="QUERY_URL", val_type="string", default=None),
            EnvConfig(env_key="INGEST_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="API_KEY_HEADER", val_type="string", default="X-API-Key"),
            EnvConfig(env_key="API_KEY_HOSTS", val_type="list", default=[]),
            EnvConfig(env_key="CHANNEL", val_type="string", default="qa-form"),
            EnvConfig(env_key="USER", val_type="string", default="form-user"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {self._api_key_header: self._api_key}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        # webhooks are configured as absolute URLs
        return ""

    def _get_endpoint_healthcheck(self) -> str:
        return str(httpx.URL(self._query_url).join("/healthz"))

    def _get_endpoint_query(self) -> str:
        return self._query_url

    def _get_endpoint_ingest(self) -> str:
        return self._ingest_url

    ################ PAYLOAD BUILDER ##################
    def get_query_payload(self, question: str) -> dict:
        return {
            "question": question,
            "channel": self._channel,
            "user": self._user,
        }

    def get_ingest_payload(self, document: IngestDocument) -> dict:
        return {
            "title": document.title,
            "document_type": document.document_type,
            "repo": document.repo,
            "content": document.content,
            "source_url": document.source_url,
            "source": self._channel,
        }
