import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sistahology.fastapi import form_dependency
from sistahology.forms import CONTACT_FORM, SECTION_ICON_RULE, FormSchema
from sistahology.models import FormSubmission, ValidationRule

# --- Schemas for testing ---

SECTION_FORM = FormSchema(
    initial_values={"title": "", "icon": "Heart", "age": 0},
    rules={
        "icon": SECTION_ICON_RULE,
        "age": ValidationRule(custom=lambda v: v >= 18),
    },
)

BLOG_POST_FORM = FormSchema(
    initial_values={"title": "", "content_html": "", "published": False, "position": 0},
    rules={
        "title": ValidationRule(required=True, max_length=120),
        "content_html": ValidationRule(required=True),
    },
)


@pytest.fixture
def client():
    app = FastAPI()

    @app.post("/contact")
    async def contact(result: FormSubmission = form_dependency(CONTACT_FORM)):
        return result

    @app.post("/admin/posts")
    async def create_post(result: FormSubmission = form_dependency(BLOG_POST_FORM, html_fields={"content_html"})):
        return result

    @app.post("/admin/posts/small")
    async def create_small_post(
        result: FormSubmission = form_dependency(BLOG_POST_FORM, html_fields={"content_html"}, max_field_size=20)
    ):
        return result

    @app.post("/admin/sections")
    async def update_section(result: FormSubmission = form_dependency(SECTION_FORM)):
        return result

    return TestClient(app)


def test_valid_contact_form(client):
    response = client.post("/contact", data={
        "name": "Ada",
        "email": "ada@example.com",
        "subject": "Hello",
        "message": "Love the journal prompts",
    })
    body = response.json()

    assert response.status_code == 200
    assert body["is_valid"] is True
    assert body["errors"] == []
    assert body["values"]["name"] == "Ada"


def test_missing_fields_are_reported(client):
    response = client.post("/contact", data={"name": "Ada", "email": "nope"})
    body = response.json()

    assert body["is_valid"] is False
    fields = {e["field"]: e["message"] for e in body["errors"]}
    assert fields["email"] == "Please enter a valid email address"
    assert fields["subject"] == "subject is required"
    assert fields["message"] == "message is required"


def test_json_payload(client):
    response = client.post("/contact", json={
        "name": "Ada",
        "email": "ada@example.com",
        "subject": "Hi",
        "message": "Hello there",
        "unexpected": "dropped",
    })
    body = response.json()

    assert body["is_valid"] is True
    assert "unexpected" not in body["values"]


def test_unsupported_content_type_yields_empty_form(client):
    response = client.post("/contact", content=b"name=Ada", headers={"content-type": "text/plain"})
    body = response.json()

    assert body["is_valid"] is False
    assert len(body["errors"]) == 4


def test_html_fields_are_sanitized(client):
    response = client.post("/admin/posts", data={
        "title": "<b>Spring</b> gathering",
        "content_html": '<p class="text-sistah-pink evil">Join us</p><script>alert(1)</script>'
                        '<a href="https://example.com" target="_blank">RSVP</a>',
    })
    body = response.json()

    assert body["is_valid"] is True
    content = body["values"]["content_html"]
    assert "<script" not in content
    assert "evil" not in content
    assert 'rel="noopener"' in content
    assert body["sanitized_data"]["content_html"] == content
    # Only declared HTML fields go through the sanitizer.
    assert body["values"]["title"] == "<b>Spring</b> gathering"


def test_html_that_sanitizes_to_nothing_is_required(client):
    response = client.post("/admin/posts", data={
        "title": "Empty",
        "content_html": "<script>alert(1)</script>",
    })
    body = response.json()

    assert body["is_valid"] is False
    assert any(e["field"] == "content_html" and e["message"] == "content_html is required" for e in body["errors"])


def test_checkbox_last_value_wins(client):
    response = client.post(
        "/admin/posts",
        content=b"title=Hi&content_html=%3Cp%3Ex%3C%2Fp%3E&published=false&published=on&position=2",
        headers={"content-type": "application/x-www-form-urlencoded"},
    )
    body = response.json()

    assert body["values"]["published"] is True
    assert body["values"]["position"] == 2


def test_max_field_size(client):
    response = client.post("/admin/posts/small", data={
        "title": "Long",
        "content_html": "<p>" + "A" * 100 + "</p>",
    })
    body = response.json()

    assert body["is_valid"] is False
    assert any("exceeds maximum size 20" in e["message"] for e in body["errors"])


def test_unhashable_icon_is_a_field_error(client):
    response = client.post("/admin/sections", json={"title": "Values", "icon": ["Heart"]})
    body = response.json()

    assert response.status_code == 200
    assert body["is_valid"] is False
    assert [e["field"] for e in body["errors"]] == ["icon"]


def test_mistyped_value_is_a_field_error(client):
    response = client.post("/admin/sections", data={"title": "Values", "age": "abc"})
    body = response.json()

    assert response.status_code == 200
    assert body["is_valid"] is False
    assert {e["field"]: e["message"] for e in body["errors"]} == {"age": "age is invalid"}


def test_malformed_json_is_an_empty_form(client):
    response = client.post("/contact", content=b"{not json", headers={"content-type": "application/json"})
    body = response.json()

    assert response.status_code == 200
    assert body["is_valid"] is False
    assert len(body["errors"]) == 4


def test_html_error_reports_raw_input(client):
    response = client.post("/admin/posts", data={
        "title": "Empty",
        "content_html": "<script>alert(1)</script>",
    })
    error = next(e for e in response.json()["errors"] if e["field"] == "content_html")

    assert error["input_value"] == "<script>alert(1)</script>"
    assert error["sanitized_value"] == ""
