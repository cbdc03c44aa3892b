import pytest

from minitls.common.config import HandshakeConfig

ENV_NAMES = [
    "SERVER_HOST", "SERVER_PORT", "RSA_KEY_BITS", "DH_PRIME_BITS", "KDF_ITERATIONS",
    "PRIMALITY_ROUNDS", "CIPHER", "SIGNED_CERTIFICATES", "REQUIRE_SIGNED_CERTIFICATE",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_NAMES:
        # registered either way, so values loaded from a .env file are undone at teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env):
    config = HandshakeConfig.from_env()
    assert config == HandshakeConfig()
    assert (config.server_host, config.server_port) == ("localhost", 8888)
    assert config.rsa_key_bits == config.dh_prime_bits == 1024
    assert config.kdf_iterations == 10000
    assert config.cipher == "xor"
    assert not config.signed_certificates


def test_environment_overrides(clean_env):
    clean_env.setenv("SERVER_PORT", "9999")
    clean_env.setenv("RSA_KEY_BITS", "512")
    clean_env.setenv("CIPHER", "aes-128-ecb")
    clean_env.setenv("SIGNED_CERTIFICATES", "true")
    clean_env.setenv("REQUIRE_SIGNED_CERTIFICATE", "0")

    config = HandshakeConfig.from_env()
    assert config.server_port == 9999
    assert config.rsa_key_bits == 512
    assert config.cipher == "aes-128-ecb"
    assert config.signed_certificates
    assert not config.require_signed_certificate


def test_dotenv_file(clean_env, tmp_path):
    (tmp_path / ".env").write_text("DH_PRIME_BITS=256\nPRIMALITY_ROUNDS=20\n")
    config = HandshakeConfig.from_env()
    assert config.dh_prime_bits == 256
    assert config.primality_rounds == 20


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        HandshakeConfig().cipher = "aes-128-ecb"
