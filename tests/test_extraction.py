import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from jobhunt.config import Config
from jobhunt.errors import ConfigurationError, ExtractionError
from jobhunt.extraction import ExtractionClient, strip_code_fences


def reply(content):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"choices": [{"message": {"content": content}}]}
    return response


@pytest.fixture
def client():
    return ExtractionClient(api_key="test-key", model="test/model")


def test_missing_key_is_configuration_error_without_request():
    client = ExtractionClient(api_key=None)

    with patch("jobhunt.extraction.requests.post") as post:
        with pytest.raises(ConfigurationError):
            client.parse_free_text("Senior Engineer at Acme")
        post.assert_not_called()


def test_from_config_reads_key_from_environment(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "env-key")
    client = ExtractionClient.from_config(Config(request_timeout=30))

    assert client.api_key == "env-key"
    assert client.timeout == 30


def test_parse_free_text(client):
    payload = {
        "company": "Acme",
        "role": "Backend Engineer",
        "location": "Remote",
        "description": "Build APIs.",
        "keySkills": ["Python", "SQL"],
        "contacts": [{"name": "Dana Lee", "email": "dana@acme.example"}],
    }
    with patch("jobhunt.extraction.requests.post", return_value=reply(json.dumps(payload))) as post:
        result = client.parse_free_text("We are hiring a Backend Engineer at Acme...")

    assert result.company == "Acme"
    assert result.key_skills == ["Python", "SQL"]
    assert result.contacts[0].name == "Dana Lee"
    assert result.contacts[0].id
    assert result.contacts[0].phone == ""

    body = post.call_args.kwargs["json"]
    assert body["model"] == "test/model"
    assert body["response_format"]["type"] == "json_schema"
    assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"
    assert post.call_args.kwargs["timeout"] is None


def test_parse_tolerates_markdown_fences(client):
    content = '```json\n{"company": "Acme", "role": "SRE", "keySkills": []}\n```'
    with patch("jobhunt.extraction.requests.post", return_value=reply(content)):
        result = client.parse_free_text("...")

    assert result.role == "SRE"
    assert result.location == ""
    assert result.contacts == []


def test_schema_mismatch_is_extraction_error(client):
    with patch("jobhunt.extraction.requests.post", return_value=reply('{"role": "SRE"}')):
        with pytest.raises(ExtractionError):
            client.parse_free_text("...")


def test_non_json_reply_is_extraction_error(client):
    with patch("jobhunt.extraction.requests.post", return_value=reply("Sorry, I can't help")):
        with pytest.raises(ExtractionError):
            client.parse_free_text("...")


def test_transport_failure_is_extraction_error(client):
    with patch(
        "jobhunt.extraction.requests.post",
        side_effect=requests.ConnectionError("unreachable"),
    ) as post:
        with pytest.raises(ExtractionError):
            client.analyze_correspondence("See you Tuesday")

    assert post.call_count == 1


def test_http_error_is_extraction_error(client):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("429 Too Many Requests")
    with patch("jobhunt.extraction.requests.post", return_value=response):
        with pytest.raises(ExtractionError):
            client.suggest_interview_questions("SRE", "Acme", "Keep things running")


def test_analyze_correspondence_with_event(client):
    content = json.dumps(
        {"summary": "Interview invite.", "suggestedEvent": {"title": "Onsite", "date": "2024-03-05"}}
    )
    with patch("jobhunt.extraction.requests.post", return_value=reply(content)) as post:
        analysis = client.analyze_correspondence("Join us for an onsite on March 5")

    assert analysis.summary == "Interview invite."
    assert analysis.suggested_event.title == "Onsite"
    assert analysis.suggested_event.date == "2024-03-05"
    prompt = post.call_args.kwargs["json"]["messages"][0]["content"]
    assert "Current Date for reference" in prompt
    assert "Join us for an onsite on March 5" in prompt


def test_analyze_correspondence_without_event(client):
    content = json.dumps({"summary": "Rejection.", "suggestedEvent": None})
    with patch("jobhunt.extraction.requests.post", return_value=reply(content)):
        analysis = client.analyze_correspondence("Unfortunately...")

    assert analysis.suggested_event is None


def test_questions_truncate_description(client):
    description = "A" * 1990 + "B" * 500
    content = json.dumps({"questions": ["Why Acme?", " ", "Describe an outage."]})
    with patch("jobhunt.extraction.requests.post", return_value=reply(content)) as post:
        questions = client.suggest_interview_questions("SRE", "Acme", description)

    assert questions == ["Why Acme?", "Describe an outage."]
    prompt = post.call_args.kwargs["json"]["messages"][0]["content"]
    assert "A" * 1990 + "B" * 10 in prompt
    assert "B" * 11 not in prompt


def test_questions_accept_bare_list(client):
    with patch("jobhunt.extraction.requests.post", return_value=reply('["Q1", "Q2"]')):
        assert client.suggest_interview_questions("SRE", "Acme", "") == ["Q1", "Q2"]


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'
