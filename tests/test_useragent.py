import pytest

from mockes.useragent import parse_user_agent


@pytest.mark.parametrize(
    "user_agent,name,version",
    [
        ("Elastic-filebeat/8.12.1 (linux; amd64; 1a2b3c; 2024-01-01)", "Elastic-filebeat", "8.12.1"),
        ("elasticsearch-py/8.11.0 (Python/3.11.4; elastic-transport/8.10.0)", "elasticsearch-py", "8.11.0"),
        ("Go-http-client/1.1", "Go-http-client", "1.1.0"),
        ("curl/8", "curl", "8.0.0"),
        ("no version here", "no version here", "0.0.0"),
        ("", "", "0.0.0"),
        (None, "", "0.0.0"),
        (
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.6099.109 Safari/537.36",
            "Chrome",
            "120.0.6099",
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.2210.91",
            "Edge",
            "120.0.2210",
        ),
        ("Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0", "Firefox", "121.0.0"),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_2) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
            "Safari",
            "17.2.0",
        ),
        ("Mozilla/5.0 (compatible; unknown)", "Mozilla", "5.0.0"),
    ],
)
def test_parse_user_agent(user_agent, name: str, version: str) -> None:
    identity = parse_user_agent(user_agent)

    assert identity.name == name
    assert identity.version == version
