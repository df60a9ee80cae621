import os
from tara.config import Settings, export_credentials


def test_credentials_from_dotenv_reach_the_environment(monkeypatch):
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    s = Settings(GOOGLE_APPLICATION_CREDENTIALS="/secrets/tts.json", OPENAI_API_KEY="sk-test")
    export_credentials(s)
    assert os.environ["GOOGLE_APPLICATION_CREDENTIALS"] == "/secrets/tts.json"
    assert os.environ["OPENAI_API_KEY"] == "sk-test"


def test_process_environment_wins(monkeypatch):
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/from/shell.json")
    export_credentials(Settings(GOOGLE_APPLICATION_CREDENTIALS="/from/dotenv.json"))
    assert os.environ["GOOGLE_APPLICATION_CREDENTIALS"] == "/from/shell.json"
