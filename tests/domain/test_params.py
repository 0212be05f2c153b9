import pytest

from domain.exceptions import ConfigurationError
from domain.params import LoginParams, SearchParams
from domain.validation import ValidationSpec


class TestLoginParams:
    def test_defaults(self):
        params = LoginParams.builder().build()
        assert params.username == "username"
        assert params.password == "password"
        assert params.url == "user/login"
        assert params.form_selector == "user-login-form"
        assert params.login_page_validation is None
        assert params.logged_in_validation is None

    def test_expected_title_defaults_to_username(self):
        params = LoginParams.builder().username("editor").build()
        assert params.expected_title == "editor"

    def test_explicit_title_wins(self):
        params = LoginParams.builder().username("editor").title("My account").build()
        assert params.expected_title == "My account"

    def test_builder_sets_validations(self):
        spec = ValidationSpec.builder().status(200).build()
        params = LoginParams.builder().login_page_validation(spec).logged_in_validation(spec).build()
        assert params.login_page_validation is spec
        assert params.logged_in_validation is spec

    @pytest.mark.parametrize("setter", ["url", "form_selector"])
    def test_empty_values_rejected(self, setter):
        with pytest.raises(ConfigurationError):
            getattr(LoginParams.builder(), setter)("")

    def test_params_are_frozen(self):
        params = LoginParams.builder().build()
        with pytest.raises(Exception):  # FrozenInstanceError
            params.username = "other"


class TestSearchParams:
    def test_defaults(self):
        params = SearchParams.builder().build()
        assert params.keys == ""
        assert params.url == "search"
        assert params.submit == "Search"
        assert params.title is None
        assert params.form_selector == "search-form"
        assert params.form_values == ("form_build_id", "form_id")

    def test_builder_sets_fields(self):
        params = (
            SearchParams.builder()
            .keys("soup")
            .url("/en/search/node")
            .submit("Go")
            .title("Search")
            .form_selector("search-block-form")
            .form_values(["form_id"])
            .build()
        )
        assert params.keys == "soup"
        assert params.url == "/en/search/node"
        assert params.submit == "Go"
        assert params.title == "Search"
        assert params.form_selector == "search-block-form"
        assert params.form_values == ("form_id",)

    @pytest.mark.parametrize("setter", ["url", "submit", "form_selector"])
    def test_empty_values_rejected(self, setter):
        with pytest.raises(ConfigurationError):
            getattr(SearchParams.builder(), setter)("")
