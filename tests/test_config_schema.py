import json

from zap_agent.config.loader import get_config_path, load_config, save_config
from zap_agent.config.schema import Config


def test_defaults_mirror_the_original_model_table():
    config = Config()

    assert config.enabled_prefixes() == {
        "ChatGPT": "!chatgpt",
        "GeminiVision": "!gemini-vision",
        "Gemini": "!chat",
        "whatsapp-ai-bot": "!bot",
    }
    assert config.enable_prefix.enable is False
    assert config.enable_prefix.default_model == "Gemini"
    assert config.models.builtin["GeminiVision"].kind == "image"
    assert config.memory.history_size == 10
    assert config.memory.reset_cron == "0 0 * * *"
    assert config.knowledge.base_url == "http://localhost:3000"


def test_camel_case_keys_are_accepted():
    config = Config.model_validate(
        {
            "enablePrefix": {"enable": True, "defaultModel": "ChatGPT"},
            "knowledge": {"baseUrl": "http://api.loja", "timeoutSeconds": 3},
            "channels": {"whatsapp": {"bridgeUrl": "ws://bridge:3001", "allowFrom": ["5511"]}},
            "models": {
                "custom": [
                    {"modelName": "faq", "prefix": "!faq", "context": "faq.md", "enable": True}
                ]
            },
        }
    )

    assert config.enable_prefix.enable is True
    assert config.enable_prefix.default_model == "ChatGPT"
    assert config.knowledge.base_url == "http://api.loja"
    assert config.knowledge.timeout_seconds == 3.0
    assert config.channels.whatsapp.allow_from == ["5511"]
    assert config.model_id("faq") == "gemini/gemini-1.5-flash"
    assert config.enabled_prefixes()["faq"] == "!faq"


def test_disabled_models_have_no_prefix():
    config = Config.model_validate(
        {"models": {"builtin": {"Gemini": {"prefix": "!chat", "enable": False}}, "custom": []}}
    )

    assert config.enabled_prefixes() == {}
    assert config.model_id("Gemini") == "gemini/gemini-1.5-flash"
    assert config.model_id("Nope") is None


def test_provider_resolution_by_model_id():
    config = Config.model_validate(
        {"providers": {"openai": {"apiKey": "sk-openai"}, "gemini": {"apiKey": "g-key"}}}
    )

    assert config.provider_for("gpt-3.5-turbo") == "openai"
    assert config.provider_for("gemini/gemini-1.5-flash") == "gemini"
    assert config.provider_for("groq/llama3-8b-8192") == "groq"
    assert config.provider_for("mistral-large") == "openrouter"
    assert config.get_api_key("gpt-3.5-turbo") == "sk-openai"
    assert config.get_api_key("gemini/gemini-1.5-flash") == "g-key"
    assert config.get_api_key("groq/llama3-8b-8192") is None


def test_env_overrides_nested_values(monkeypatch):
    monkeypatch.setenv("ZAP_AGENT_KNOWLEDGE__BASE_URL", "http://env.loja")
    monkeypatch.setenv("ZAP_AGENT_MEMORY__HISTORY_SIZE", "4")

    config = Config()

    assert config.knowledge.base_url == "http://env.loja"
    assert config.memory.history_size == 4


def test_env_overrides_prefix_section(monkeypatch):
    monkeypatch.setenv("ZAP_AGENT_ENABLE_PREFIX__ENABLE", "true")
    monkeypatch.setenv("ZAP_AGENT_ENABLE_PREFIX__DEFAULT_MODEL", "ChatGPT")

    config = Config()

    assert config.enable_prefix.enable is True
    assert config.enable_prefix.default_model == "ChatGPT"
    assert config.model_dump(by_alias=True)["enablePrefix"]["enable"] is True


def test_load_config_missing_file_returns_defaults(tmp_path):
    config = load_config(tmp_path / "absent.json")

    assert config.enable_prefix.default_model == "Gemini"


def test_load_config_invalid_json_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    config = load_config(path)

    assert config.knowledge.base_url == "http://localhost:3000"


def test_save_config_writes_camel_case(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = Config.model_validate({"memory": {"historySize": 3}})

    save_config(config, path)
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data["enablePrefix"]["defaultModel"] == "Gemini"
    assert data["memory"]["historySize"] == 3
    assert load_config(path).memory.history_size == 3


def test_config_path_follows_data_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("ZAP_AGENT_DATA_DIR", str(tmp_path / "profile"))

    assert get_config_path() == tmp_path / "profile" / "config.json"
