import json

import pytest

from application.services.form_extractor import (
    decode_embedded_form,
    extract_form,
    extract_updated_build_id,
    extract_value,
    extract_values,
    find_form,
    require_form,
    require_value,
)
from domain.exceptions import FieldNotFound, FormNotFound
from domain.forms import FormQuery

LOGIN_PAGE = """
<html><body>
<form id="search-block-form" action="/search">
  <input type="hidden" name="form_build_id" value="form-SEARCH" />
</form>
<form class="user-login-form" data-drupal-selector="user-login-form" action="/user/login" method="post" id="user-login-form">
  <input type="text" name="name" value="" />
  <input type="password" name="pass" />
  <input type="hidden" name="form_build_id" value="form-LOGIN" />
  <input type="hidden" name="form_id" value="user_login_form" />
  <input type="submit" name="op" value="Log in" />
</form>
<form id="newsletter"><input name="form_build_id" value="form-NEWS"></form>
</body></html>
"""


class TestFindForm:
    def test_finds_form_between_other_forms(self, recording_logger):
        form = find_form(LOGIN_PAGE, "user-login-form", logger=recording_logger)

        assert form is not None
        assert 'value="form-LOGIN"' in form
        assert "form-SEARCH" not in form
        assert "form-NEWS" not in form
        assert recording_logger.records == []

    def test_matches_by_data_drupal_selector(self):
        body = '<form data-drupal-selector="user-login-form" class="foo"><input name="build_id" value="form-AbC123"/></form>'
        form = find_form(body, "user-login-form")
        assert extract_value(form, "build_id") == "form-AbC123"

    def test_first_of_duplicate_selectors_wins(self):
        body = '<form id="f"><input name="a" value="1"></form><form id="f"><input name="a" value="2"></form>'
        assert extract_value(find_form(body, "f"), "a") == "1"

    def test_selector_is_case_sensitive(self, recording_logger):
        body = '<form id="Search-Form"><input name="a" value="1"></form>'
        assert find_form(body, "search-form", logger=recording_logger) is None

    def test_missing_form_warns(self, recording_logger):
        assert find_form(LOGIN_PAGE, "contact-form", logger=recording_logger) is None
        assert recording_logger.events("warning") == ["form.not_found"]
        assert recording_logger.records[0][2]["selector"] == "contact-form"

    def test_selector_with_metacharacters(self):
        body = '<form id="a.b+c"><input name="x" value="1"></form><form id="aXb+c"></form>'
        assert find_form(body, "a.b+c") == '<input name="x" value="1">'


class TestExtractValue:
    def test_field_name_with_brackets(self):
        form = '<input type="checkbox" name="q[]" value="on"><input name="q" value="plain">'
        assert extract_value(form, "q[]") == "on"
        assert extract_value(form, "q") == "plain"

    def test_entity_encoded_value_is_decoded(self):
        form = '<input type="text" name="search[keys]" value="Tom &amp; Jerry" />'
        assert extract_value(form, "search[keys]") == "Tom & Jerry"

    def test_quote_entities(self):
        form = '<input name="title" value="&quot;quoted&quot; &#039;single&#039;">'
        assert extract_value(form, "title") == "\"quoted\" 'single'"

    def test_value_before_name(self):
        form = '<input value="before" type="hidden" name="form_id">'
        assert extract_value(form, "form_id") == "before"

    def test_input_without_value_is_empty_string(self):
        assert extract_value('<input type="password" name="pass" />', "pass") == ""

    def test_textarea_value(self):
        form = "<textarea name=\"body\" rows=3>a &lt;b&gt; c</textarea>"
        assert extract_value(form, "body") == "a <b> c"

    def test_button_value(self):
        assert extract_value('<button type="submit" name="op" value="Search">Go</button>', "op") == "Search"

    def test_field_name_is_case_sensitive(self, recording_logger):
        assert extract_value('<input name="Form_Id" value="x">', "form_id", logger=recording_logger) is None

    def test_missing_field_warns(self, recording_logger):
        assert extract_value("<input name=\"a\" value=\"1\">", "b", logger=recording_logger) is None
        assert recording_logger.events("warning") == ["form.field_not_found"]


class TestExtractValues:
    def test_missing_fields_are_missing_keys(self, recording_logger):
        form = find_form(LOGIN_PAGE, "user-login-form")
        values = extract_values(form, ["form_build_id", "form_id", "form_token"], logger=recording_logger)

        assert values == {"form_build_id": "form-LOGIN", "form_id": "user_login_form"}
        assert recording_logger.events("warning") == ["form.field_not_found"]

    def test_idempotent(self):
        form = find_form(LOGIN_PAGE, "user-login-form")
        first = extract_values(form, ["form_build_id", "form_id", "op"])
        second = extract_values(form, ["form_build_id", "form_id", "op"])
        assert first == second == {"form_build_id": "form-LOGIN", "form_id": "user_login_form", "op": "Log in"}

    def test_extract_form(self):
        values = extract_form(LOGIN_PAGE, FormQuery("newsletter", ("form_build_id",)))
        assert values == {"form_build_id": "form-NEWS"}

    def test_extract_form_without_form(self, recording_logger):
        assert extract_form(LOGIN_PAGE, FormQuery("nope", ("a",)), logger=recording_logger) is None


class TestRequire:
    def test_require_form_raises(self):
        with pytest.raises(FormNotFound) as excinfo:
            require_form(LOGIN_PAGE, "contact-form")
        assert excinfo.value.selector == "contact-form"

    def test_require_value_raises(self):
        form = require_form(LOGIN_PAGE, "user-login-form")
        assert require_value(form, "form_id") == "user_login_form"
        with pytest.raises(FieldNotFound) as excinfo:
            require_value(form, "form_token")
        assert excinfo.value.field_name == "form_token"


EMBEDDED_FORM = '<form id="comment-form"><input name="form_build_id" value="form-A&amp;B"><input name="form_id" value="comment_form"></form>'


class TestEmbeddedForm:
    def test_bare_ajax_command_list(self):
        payload = json.dumps([{"command": "settings", "settings": {}}, {"command": "insert", "data": EMBEDDED_FORM}])

        form = decode_embedded_form(payload, "comment-form")

        assert extract_values(form, ["form_build_id", "form_id"]) == {
            "form_build_id": "form-A&B",
            "form_id": "comment_form",
        }

    def test_bigpipe_script_in_page(self):
        commands = json.dumps([{"command": "insert", "data": EMBEDDED_FORM}])
        # Drupal escapes "<" inside script payloads
        escaped = commands.replace("<", "\\u003C")
        page = (
            "<html><body><span data-big-pipe-placeholder-id=\"x\"></span>"
            f'<script type="application/vnd.drupal-ajax" data-big-pipe-replacement-for-placeholder-with-id="x">{escaped}</script>'
            "</body></html>"
        )

        form = decode_embedded_form(page, "comment-form")

        assert extract_value(form, "form_id") == "comment_form"

    def test_not_found_warns(self, recording_logger):
        payload = json.dumps([{"command": "insert", "data": "<p>nothing</p>"}])
        assert decode_embedded_form(payload, "comment-form", logger=recording_logger) is None
        assert recording_logger.events("warning") == ["form.embedded_not_found"]

    def test_undecodable_payload_warns(self, recording_logger):
        assert decode_embedded_form("[not json", "comment-form", logger=recording_logger) is None
        assert recording_logger.events("warning") == ["form.ajax_payload_undecodable", "form.embedded_not_found"]


class TestUpdatedBuildId:
    def test_new_build_id(self):
        payload = json.dumps(
            [
                {"command": "update_build_id", "old": "form-other", "new": "form-wrong"},
                {"command": "update_build_id", "old": "form-old", "new": "form-new"},
            ]
        )
        assert extract_updated_build_id(payload, "form-old") == "form-new"

    def test_missing_update_warns(self, recording_logger):
        payload = json.dumps([{"command": "insert", "data": ""}])
        assert extract_updated_build_id(payload, "form-old", logger=recording_logger) is None
        assert recording_logger.events("warning") == ["form.build_id_update_not_found"]


class TestAttributeBoundaries:
    def test_id_and_drupal_selector_in_document_order(self):
        body = '<form data-drupal-selector="x"><i>first</i></form><form id="x"><i>second</i></form>'
        assert find_form(body, "x") == "<i>first</i>"

    def test_value_text_inside_placeholder_is_ignored(self):
        form = '<input name="f" placeholder="e.g. value=3" value="real">'
        assert extract_value(form, "f") == "real"

    def test_name_text_inside_other_attribute_is_ignored(self, recording_logger):
        form = '<input placeholder=\'name="f"\' name="g" value="x">'
        assert extract_value(form, "f", logger=recording_logger) is None
        assert extract_value(form, "g") == "x"
