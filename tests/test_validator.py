"""
End-to-end tests for Validator: custom predicates, modules, message files,
i18n and nested schemas.
"""
import pytest

from formrules.errors import ErrorCode
from formrules.validation import (
    FieldFailure,
    PredicateModule,
    SchemaBuilder,
    UnknownPredicateError,
    ValidationResult,
    Validator,
    YamlI18n,
    rule,
)


def _email_module(messages_path) -> PredicateModule:
    module = PredicateModule("contacts", messages_path=messages_path)

    @module.predicate("email?")
    def email(value):
        return "@" in value

    return module


def _url(value):
    return value.startswith("http")


class TestCustomPredicates:
    """Inline and module-supplied predicates."""

    def test_inline_predicate_with_messages_file(self, validate, messages_path):
        builder = SchemaBuilder().configure(messages_file=messages_path)
        builder.predicate("email?", lambda value: "@" in value)
        builder.required("foo", rule("email?"))

        assert validate(builder, {"foo": "test@hanamirb.org"}).success
        result = validate(builder, {"foo": "test"})
        assert not result.success
        assert result.messages == {"foo": ["must be an email"]}

    def test_predicates_module(self, validate, messages_path):
        builder = SchemaBuilder().predicates(_email_module(messages_path))
        builder.required("foo", rule("email?"))

        assert validate(builder, {"foo": "test@hanamirb.org"}).success
        assert validate(builder, {"foo": "test"}).messages == {"foo": ["must be an email"]}

    def test_inline_predicate_with_registered_message(self, validate):
        builder = SchemaBuilder()
        builder.predicate("url?", _url, message="must be an URL")
        builder.required("foo", rule("url?"))

        assert validate(builder, {"foo": "http://hanamirb.org"}).success
        assert validate(builder, {"foo": "test"}).messages == {"foo": ["must be an URL"]}

    @pytest.mark.parametrize("module_first", [True, False])
    def test_inline_and_module_compose(self, validate, messages_path, module_first):
        """Inline predicate and module compose in either order."""
        builder = SchemaBuilder()
        if module_first:
            builder.predicates(_email_module(messages_path))
        builder.predicate("url?", _url, message="must be an URL")
        if not module_first:
            builder.predicates(_email_module(messages_path))
        builder.required("foo", rule("url?") | rule("email?"))

        assert validate(builder, {"foo": "http://hanamirb.org"}).success
        assert validate(builder, {"foo": "foo@mailinator.com"}).success
        result = validate(builder, {"foo": "test"})
        assert result.messages == {"foo": ["must be an URL or must be an email"]}

    def test_i18n_messages(self, validate, i18n_path):
        builder = SchemaBuilder().configure(mode="i18n", i18n=YamlI18n([i18n_path]))
        builder.predicate("url?", _url)
        builder.required("foo", rule("url?"))

        assert validate(builder, {"foo": "http://hanamirb.org"}).success
        assert validate(builder, {"foo": "test"}).messages == {"foo": ["must be an URL"]}
        assert validate(builder, {"foo": "test"}, locale="de").messages == {"foo": ["muss eine URL sein"]}

    def test_i18n_mode_uses_module_messages(self, validate, messages_path, i18n_path):
        """A module's messages file still applies when the schema runs in i18n mode."""
        module = PredicateModule("people", messages_path=messages_path)
        module.predicate("adult?", lambda age: age > 18)
        builder = SchemaBuilder().configure(mode="i18n", i18n=YamlI18n([i18n_path])).predicates(module)
        builder.required("age", rule("adult?"))
        builder.required("name", rule("str?"))

        result = validate(builder, {"age": 3})
        assert result.messages == {"age": ["must be an adult"], "name": ["is required"]}

    def test_i18n_nested_schema_messages_file(self, validate, nested_messages_path, i18n_path):
        builder = SchemaBuilder().configure(mode="i18n", i18n=YamlI18n([i18n_path]))
        with builder.schema("details") as details:
            details.configure(messages_file=nested_messages_path)
            details.required("foo", rule("even?"))
            details.required("site", rule("url?"))

        result = validate(builder, {"details": {"foo": 1, "site": "x"}}, locale="de")
        assert result.messages == {"details": {"foo": ["must be an even number"], "site": ["muss eine URL sein"]}}

    def test_unknown_predicate_raises_before_validation(self):
        builder = SchemaBuilder().required("foo", rule("email_address?"))
        with pytest.raises(UnknownPredicateError, match=r"\+email_address\?\+ is not a valid predicate name"):
            Validator(builder)

    def test_registered_message_beats_messages_file(self, messages_path):
        builder = SchemaBuilder().configure(messages_file=messages_path)
        builder.predicate("adult?", lambda age: age > 18, message="not old enough")
        builder.required("name", rule("format?", r"Frank"))
        builder.required("age", rule("adult?"))

        result = Validator(builder).validate({"name": "John", "age": 15})
        assert not result.success
        assert result.messages["name"] == ["must be frank"]
        assert result.messages["age"] == ["not old enough"]


class TestFieldPresence:
    """Required and optional keys."""

    def test_required_absent_skips_rule(self):
        calls = []
        builder = SchemaBuilder()
        builder.predicate("tracked?", lambda value: calls.append(value) or True, message="tracked")
        builder.required("foo", rule("tracked?"))

        result = Validator(builder).validate({})
        assert result.messages == {"foo": ["is missing"]}
        assert calls == []

    def test_optional_absent_is_vacuous_pass(self):
        builder = SchemaBuilder().optional("foo", rule("email?"))
        result = Validator(builder).validate({})
        assert result.success
        assert result.messages == {}

    def test_optional_present_is_checked(self):
        builder = SchemaBuilder().optional("foo", rule("email?"))
        assert Validator(builder).validate({"foo": "test"}).messages == {"foo": ["must be an email"]}

    def test_presence_only_field(self):
        builder = SchemaBuilder().required("foo")
        assert Validator(builder).validate({"foo": None}).success
        assert Validator(builder).validate({}).messages == {"foo": ["is missing"]}

    def test_presence_message_is_localized(self, messages_path):
        builder = SchemaBuilder().configure(messages_file=messages_path).required("foo", rule("str?"))
        assert Validator(builder).validate({}, locale="it").messages == {"foo": ["è obbligatorio"]}

    def test_extra_keys_are_ignored(self):
        builder = SchemaBuilder().required("foo", rule("str?"))
        assert Validator(builder).validate({"foo": "x", "bar": 1}).success


class TestNestedValidation:
    """Nested schemas validate sub-records with their own scope."""

    def test_nested_custom_predicate(self, messages_path):
        builder = SchemaBuilder()
        with builder.schema("details") as details:
            details.configure(messages_file=messages_path)
            details.predicate("odd_number?", lambda value: value % 2 == 1)
            details.required("foo", rule("odd_number?", message="must be odd"))

        result = Validator(builder).validate({"details": {"foo": 2}})
        assert not result.success
        assert result.messages["details"]["foo"] == ["must be odd"]

    def test_nested_predicate_message_from_nested_file(self, messages_path):
        """The nested schema's own messages file supplies the text."""
        builder = SchemaBuilder()
        with builder.schema("details") as details:
            details.configure(messages_file=messages_path)
            details.predicate("odd?", lambda value: value % 2 == 1)
            details.required("foo", rule("odd?"))

        result = Validator(builder).validate({"details": {"foo": 2}})
        assert result.messages == {"details": {"foo": ["must be odd"]}}
        assert Validator(builder).validate({"details": {"foo": 3}}).success

    def test_nested_passing_has_no_entry(self):
        builder = SchemaBuilder().required("name", rule("str?"))
        builder.schema("details").required("foo", rule("int?"))
        result = Validator(builder).validate({"name": 1, "details": {"foo": 1}})
        assert result.messages == {"name": ["must be a string"]}

    def test_nested_required_absent(self):
        builder = SchemaBuilder()
        builder.schema("details").required("foo", rule("int?"))
        assert Validator(builder).validate({}).messages == {"details": ["is missing"]}

    def test_nested_optional_absent(self):
        builder = SchemaBuilder()
        builder.schema("details", required=False).required("foo", rule("int?"))
        assert Validator(builder).validate({}).success

    def test_nested_value_not_a_mapping(self):
        builder = SchemaBuilder()
        builder.schema("details").required("foo", rule("int?"))
        assert Validator(builder).validate({"details": "x"}).messages == {"details": ["must be a hash"]}

    def test_deeply_nested_messages(self):
        builder = SchemaBuilder()
        builder.schema("a").schema("b").required("c", rule("gt?", 3) & rule("even?"))
        result = Validator(builder).validate({"a": {"b": {"c": 1}}})
        assert result.messages == {"a": {"b": {"c": ["must be greater than 3", "must be even"]}}}
        assert result.messages_for("a.b.c") == ["must be greater than 3", "must be even"]


class TestValidationResult:
    """The result surface used by callers."""

    def _result(self) -> ValidationResult:
        builder = SchemaBuilder().required("foo", rule("url?") | rule("email?"))
        builder.schema("details").required("bar", rule("odd?"))
        return Validator(builder).validate({"foo": "test", "details": {"bar": 2}})

    def test_failures_flatten_with_dotted_paths(self):
        assert self._result().failures() == [
            FieldFailure("foo", "must be an URL or must be an email"),
            FieldFailure("details.bar", "must be odd"),
        ]

    def test_messages_for_missing_path(self):
        assert self._result().messages_for("details.nope") == []
        assert self._result().messages_for("foo.deeper") == []

    def test_to_dict(self):
        data = self._result().to_dict()
        assert data["success"] is False
        assert data["messages"]["details"] == {"bar": ["must be odd"]}

    def test_bool_and_output(self):
        builder = SchemaBuilder().required("foo", rule("str?"))
        result = Validator(builder)({"foo": "x"})
        assert result
        assert result.output == {"foo": "x"}

    def test_success_ignores_empty_nested_entries(self):
        assert ValidationResult(messages={"details": {"foo": []}}).success
        assert not ValidationResult(messages={"details": {"foo": ["bad"]}}).success


class TestParse:
    """Result-returning entry point."""

    def test_parse_ok(self):
        validator = Validator(SchemaBuilder().required("foo", rule("str?")))
        result = validator.parse({"foo": "x"})
        assert result.is_ok()
        assert result.unwrap() == {"foo": "x"}

    def test_parse_err_carries_messages(self):
        validator = Validator(SchemaBuilder().required("foo", rule("str?")))
        result = validator.parse({"foo": 1})
        assert result.is_err()
        error = result.unwrap_err()
        assert error.code is ErrorCode.E2000_VALIDATION_GENERIC
        assert error.metadata["messages"] == {"foo": ["must be a string"]}
        assert not error.code.is_defect

    def test_non_mapping_input_is_a_type_error(self):
        validator = Validator(SchemaBuilder().required("foo", rule("str?")))
        with pytest.raises(TypeError):
            validator.validate(["foo"])


class TestSharedSchema:
    """One built schema serves many validators and inputs."""

    def test_schema_reused(self):
        schema = SchemaBuilder().required("foo", rule("email?")).build()
        first, second = Validator(schema), Validator(schema)
        assert first.validate({"foo": "a@b.io"}).success
        assert second.validate({"foo": "nope"}).messages == {"foo": ["must be an email"]}
