from pathlib import Path

from extractor.config import DEFAULT_USER_AGENT, SERVICE_NAME, load_config

ENV_KEYS = [
    "HOST",
    "PORT",
    "SERVICE_VERSION",
    "SCRAPER_USER_AGENT",
    "HTTP_TIMEOUT_MS",
    "HTTP_MAX_REDIRECTS",
    "DIRECT_HTTP2",
    "RENDER_TIMEOUT_MS",
    "RENDER_SETTLE_MS",
    "RENDER_WAIT_UNTIL",
    "BLOCKED_RESOURCE_TYPES",
    "CHROMIUM_EXECUTABLE_PATH",
    "BROWSER_ARGS_EXTRA",
    "LOG_LEVEL",
    "LOG_FILE",
]


def _clear_env(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_load_config_defaults(monkeypatch):
    _clear_env(monkeypatch)
    cfg = load_config()

    assert cfg.host == "0.0.0.0"
    assert cfg.port == 3333
    assert cfg.service_name == SERVICE_NAME
    assert cfg.service_version == "2.0.0"
    assert cfg.user_agent == DEFAULT_USER_AGENT == "facebookexternalhit/1.1"

    assert cfg.http_timeout_ms == 10000
    assert cfg.http_max_redirects == 10
    assert cfg.direct_http2 is False

    assert cfg.render_timeout_ms == 30000
    assert cfg.render_settle_ms == 2000
    assert cfg.render_wait_until == "domcontentloaded"
    assert cfg.blocked_resource_types == ("image", "stylesheet", "font", "media")
    assert cfg.chromium_executable_path is None
    assert cfg.browser_args_extra == ()

    assert cfg.log_level == "INFO"
    assert cfg.log_file is None


def test_load_config_overrides_and_clamps(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("HTTP_TIMEOUT_MS", "5")          # clamped up to 500
    monkeypatch.setenv("HTTP_MAX_REDIRECTS", "1000")    # clamped down to 30
    monkeypatch.setenv("RENDER_SETTLE_MS", "-1")        # clamped up to 0
    monkeypatch.setenv("DIRECT_HTTP2", "true")
    monkeypatch.setenv("BLOCKED_RESOURCE_TYPES", "image, font")
    monkeypatch.setenv("BROWSER_ARGS_EXTRA", "--lang=en-US,--mute-audio")
    monkeypatch.setenv("CHROMIUM_EXECUTABLE_PATH", "/usr/bin/chromium")
    monkeypatch.setenv("LOG_FILE", "logs/extractor.log")

    cfg = load_config()
    assert cfg.port == 8080
    assert cfg.http_timeout_ms == 500
    assert cfg.http_max_redirects == 30
    assert cfg.render_settle_ms == 0
    assert cfg.direct_http2 is True
    assert cfg.blocked_resource_types == ("image", "font")
    assert cfg.browser_args_extra == ("--lang=en-US", "--mute-audio")
    assert cfg.chromium_executable_path == "/usr/bin/chromium"
    assert cfg.log_file == Path("logs/extractor.log")


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setenv("RENDER_TIMEOUT_MS", "")
    cfg = load_config()
    assert cfg.port == 3333
    assert cfg.render_timeout_ms == 30000
