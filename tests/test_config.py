"""Unit tests for layered configuration and providers."""

import pytest

from gqlform.config import FormConfig, identity_form_data, resolve_config
from gqlform.errors import ConfigurationError, HookConfigurationError
from gqlform.provider import FormProvider
from gqlform.runtime import FormRuntime
from gqlform.types import FetchPolicy
from gqlform.variables import coerce_scalar, identity_variable


class TestResolveConfig:
    """Test option layering."""

    def test_defaults(self):
        config = resolve_config()
        assert config == FormConfig()
        assert config.submit_action == "submit"
        assert config.fetch_policy == "network-only"
        assert config.to_form_data is identity_form_data
        assert config.to_mutation_variable is identity_variable

    def test_later_layers_override_earlier(self):
        config = resolve_config(
            {"submit_action": "save", "fetch_policy": "cache-first"},
            {"submit_action": "publish"},
        )
        assert config.submit_action == "publish"
        assert config.fetch_policy == "cache-first"

    def test_options_replace_whole_values(self):
        config = resolve_config({"data": {"a": 1}}, {"data": {"b": 2}})
        assert config.data == {"b": 2}

    def test_handler_keywords_collected(self):
        handler = lambda event, response, form: response  # noqa: E731
        config = resolve_config({"onSubmitSuccess": handler, "on_delete": handler})
        assert config.handlers == {"onSubmitSuccess": handler, "on_delete": handler}

    def test_handlers_merged_per_name(self):
        outer = lambda *args: "outer"  # noqa: E731
        inner = lambda *args: "inner"  # noqa: E731
        config = resolve_config(
            {"onSubmit": outer, "onSubmitError": outer},
            {"handlers": {"onSubmit": inner}},
        )
        assert config.handlers == {"onSubmit": inner, "onSubmitError": outer}

    def test_unknown_option_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_config({"mutationz": {}})

    def test_fetch_policy_enum_accepted(self):
        assert resolve_config({"fetch_policy": FetchPolicy.CACHE_AND_NETWORK}).fetch_policy == "cache-and-network"

    def test_unknown_fetch_policy_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_config({"fetch_policy": "sometimes"})

    def test_none_layers_are_skipped(self):
        assert resolve_config(None, {"submit_action": "go"}, None).submit_action == "go"


class TestFormProvider:
    """Test provider-level options."""

    def test_call_site_overrides_provider(self, client):
        provider = FormProvider(client, submit_action="save", to_mutation_variable=coerce_scalar)
        config = provider.resolve(submit_action="publish")
        assert config.submit_action == "publish"
        assert config.to_mutation_variable is coerce_scalar

    def test_scope_overrides_parent(self, client):
        provider = FormProvider(client, submit_action="save", fetch_policy="cache-first")
        scoped = provider.scope(submit_action="publish")
        config = scoped.resolve()
        assert config.submit_action == "publish"
        assert config.fetch_policy == "cache-first"
        assert provider.resolve().submit_action == "save"
        assert scoped.client is client

    def test_create_form(self, client):
        provider = FormProvider(client, data={"name": "x"})
        form = provider.create_form()
        assert isinstance(form, FormRuntime)
        assert form.client is client
        assert form.form_data == {"name": "x"}

    def test_create_form_requires_client(self):
        with pytest.raises(ValueError):
            FormProvider().create_form()

    def test_unknown_option_fails_early(self, client):
        with pytest.raises(ConfigurationError):
            FormProvider(client, colour="red")

    def test_bad_handler_fails_at_form_creation(self, client):
        provider = FormProvider(client, onSubmit="nope")
        with pytest.raises(HookConfigurationError):
            provider.create_form()
