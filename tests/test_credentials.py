"""Unit tests for image_migrator/credentials.py"""

from image_migrator.credentials import Credentials, EnvironmentCredentialProvider, InteractiveCredentialProvider


class _Prompts:
    """Records prompts and answers them in order"""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.answers.pop(0)


class TestInteractiveCredentialProvider:
    """Tests for InteractiveCredentialProvider"""

    def test_prompts_for_cluster_login(self):
        """Test endpoint, username and hidden password prompts"""
        inputs = _Prompts(["https://api.example.com:6443 ", "admin"])
        secrets = _Prompts(["s3cret"])

        creds = InteractiveCredentialProvider(inputs, secrets).get_cluster_credentials()

        assert creds.cluster_endpoint == "https://api.example.com:6443"
        assert creds.cluster_username == "admin"
        assert creds.cluster_password == "s3cret"
        assert "OpenShift API endpoint" in inputs.prompts[0]
        assert "OpenShift password" in secrets.prompts[0]

    def test_configured_endpoint_is_not_prompted(self):
        """Test that only username and password are asked when the endpoint is known"""
        inputs = _Prompts(["admin"])
        secrets = _Prompts(["s3cret"])

        creds = InteractiveCredentialProvider(inputs, secrets).get_cluster_credentials("https://api.example.com:6443")

        assert creds.cluster_endpoint == "https://api.example.com:6443"
        assert len(inputs.prompts) == 1

    def test_prompts_for_selection_mode(self):
        """Test the selection mode prompt"""
        inputs = _Prompts([" 2 "])

        assert InteractiveCredentialProvider(inputs, _Prompts([])).get_selection_mode() == "2"
        assert "'all'" in inputs.prompts[0]

    def test_prompts_for_registry_credentials(self):
        """Test source token and destination login prompts"""
        inputs = _Prompts(["robot"])
        secrets = _Prompts(["source-token", "dest-password"])

        creds = InteractiveCredentialProvider(inputs, secrets).get_registry_credentials(Credentials())

        assert creds.source_token == "source-token"
        assert creds.destination_username == "robot"
        assert creds.destination_password == "dest-password"


class TestEnvironmentCredentialProvider:
    """Tests for EnvironmentCredentialProvider"""

    ENVIRON = {
        "OC_ENDPOINT": "https://api.example.com:6443",
        "OC_USERNAME": "admin",
        "OC_PASSWORD": "pw",
        "SOURCE_REGISTRY_TOKEN": "tok",
        "DESTINATION_USERNAME": "robot",
        "DESTINATION_PASSWORD": "dpw",
        "TAG_SELECTION_MODE": "all",
    }

    def test_reads_cluster_credentials(self):
        """Test cluster credentials from the environment"""
        creds = EnvironmentCredentialProvider(self.ENVIRON).get_cluster_credentials()

        assert creds.cluster_endpoint == "https://api.example.com:6443"
        assert creds.cluster_username == "admin"
        assert creds.cluster_password == "pw"

    def test_configured_endpoint_wins(self):
        """Test that an endpoint from config takes precedence"""
        creds = EnvironmentCredentialProvider(self.ENVIRON).get_cluster_credentials("https://other:6443")

        assert creds.cluster_endpoint == "https://other:6443"

    def test_reads_registry_credentials(self):
        """Test registry credentials and the Quay token fallback"""
        creds = EnvironmentCredentialProvider(self.ENVIRON).get_registry_credentials(Credentials())

        assert creds.source_token == "tok"
        assert creds.destination_username == "robot"
        assert creds.quay_token is None
        assert creds.api_token == "dpw"

    def test_explicit_quay_token(self):
        """Test that QUAY_API_TOKEN overrides the destination password for API calls"""
        environ = dict(self.ENVIRON, QUAY_API_TOKEN="quay-oauth")

        creds = EnvironmentCredentialProvider(environ).get_registry_credentials(Credentials())

        assert creds.api_token == "quay-oauth"

    def test_missing_values_are_none(self):
        """Test that unset or empty variables read as None"""
        provider = EnvironmentCredentialProvider({"OC_USERNAME": ""})

        assert provider.get_cluster_credentials().cluster_username is None
        assert provider.get_selection_mode() is None


class TestCredentialsRepr:
    """Tests for Credentials.__repr__"""

    def test_repr_hides_secrets(self):
        """Test that secrets never reach logs through repr"""
        creds = Credentials(cluster_username="admin", cluster_password="pw1", destination_password="pw2")

        text = repr(creds)

        assert "admin" in text
        assert "pw1" not in text
        assert "pw2" not in text
