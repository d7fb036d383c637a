from shared.helper.HelperConfig import HelperConfig
from shared.clients.workflow.WorkflowClientInterface import WorkflowClientInterface


class WorkflowClientManager:
    """Manager class to instantiate the configured workflow client."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """Read the workflow engine name from env configuration.

        Returns:
            str: Capitalised engine name (e.g. "N8n").

        Raises:
            ValueError: If WORKFLOW_ENGINE is set to an empty value.
        """
        engine = self.helper_config.get_string_val("WORKFLOW_ENGINE", default="n8n")
        if not engine.strip():
            raise ValueError("No workflow engine specified in configuration (WORKFLOW_ENGINE).")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> WorkflowClientInterface:
        """Instantiate the workflow client for the configured engine.

        Returns:
            WorkflowClientInterface: The instantiated client.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        engine = self._get_engine_from_env()
        class_name = f"WorkflowClient{engine}"
        try:
            module = __import__(
                f"shared.clients.workflow.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported workflow engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated workflow client for engine: %s", engine)
        return client

    def get_client(self) -> WorkflowClientInterface:
        """Return the instantiated workflow client."""
        return self.client
