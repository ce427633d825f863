"""Tests for jsonlogging/exception_serialization.py: bounded exception chain rendering."""

import jsonlogging.exception_serialization


class CustomError(Exception):
    pass


def _inner() -> None:
    raise ValueError("invalid token")


def _outer() -> None:
    _inner()


def _raise_and_catch(function) -> BaseException:
    try:
        function()
    except BaseException as error:
        return error
    raise AssertionError("function did not raise")


class TestSingleException:

    def test_type_and_message_are_rendered(self):
        serialized = jsonlogging.exception_serialization.serialize_exception(_raise_and_catch(_outer))
        assert serialized["type"] == "ValueError"
        assert serialized["message"] == "invalid token"
        assert "cause" not in serialized

    def test_frames_are_innermost_first(self):
        serialized = jsonlogging.exception_serialization.serialize_exception(_raise_and_catch(_outer))
        methods = [frame["method"] for frame in serialized["frames"]]
        assert methods[:3] == ["_inner", "_outer", "_raise_and_catch"]

    def test_frames_carry_file_and_line(self):
        serialized = jsonlogging.exception_serialization.serialize_exception(_raise_and_catch(_outer))
        innermost = serialized["frames"][0]
        assert innermost["file"].endswith("test_exception_serialization.py")
        assert isinstance(innermost["line"], int)

    def test_exception_never_raised_has_no_frames(self):
        serialized = jsonlogging.exception_serialization.serialize_exception(ValueError("not raised"))
        assert serialized["frames"] == []

    def test_non_builtin_type_is_qualified(self):
        serialized = jsonlogging.exception_serialization.serialize_exception(CustomError("boom"))
        assert serialized["type"] == f"{__name__}.CustomError"


class TestCauseChain:

    def test_explicit_cause_is_linked(self):
        def wrap() -> None:
            try:
                _inner()
            except ValueError as error:
                raise RuntimeError("request failed") from error

        serialized = jsonlogging.exception_serialization.serialize_exception(_raise_and_catch(wrap))
        assert serialized["type"] == "RuntimeError"
        assert serialized["cause"]["type"] == "ValueError"
        assert serialized["cause"]["message"] == "invalid token"

    def test_implicit_context_is_linked(self):
        def fail_while_handling() -> None:
            try:
                _inner()
            except ValueError:
                raise KeyError("missing")

        serialized = jsonlogging.exception_serialization.serialize_exception(_raise_and_catch(fail_while_handling))
        assert serialized["cause"]["type"] == "ValueError"

    def test_suppressed_context_is_not_linked(self):
        def fail_from_none() -> None:
            try:
                _inner()
            except ValueError:
                raise KeyError("missing") from None

        serialized = jsonlogging.exception_serialization.serialize_exception(_raise_and_catch(fail_from_none))
        assert "cause" not in serialized

    def test_chain_is_truncated_at_depth_limit(self):
        error: BaseException = ValueError("level 0")
        for level in range(1, 6):
            wrapper = RuntimeError(f"level {level}")
            wrapper.__cause__ = error
            error = wrapper

        serialized = jsonlogging.exception_serialization.serialize_exception(error, depth_limit=3)

        assert serialized["message"] == "level 5"
        assert serialized["cause"]["message"] == "level 4"
        last = serialized["cause"]["cause"]
        assert last["message"] == "level 3"
        assert last["truncated"] is True
        assert "cause" not in last

    def test_cyclic_chain_terminates(self):
        first = ValueError("first")
        second = RuntimeError("second")
        first.__cause__ = second
        second.__cause__ = first

        serialized = jsonlogging.exception_serialization.serialize_exception(first, depth_limit=100)

        assert serialized["cause"]["message"] == "second"
        assert serialized["cause"]["circularCause"] is True
        assert "cause" not in serialized["cause"]


class TestStackTraceText:

    def test_stack_trace_is_interpreter_rendering(self):
        text = jsonlogging.exception_serialization.format_stack_trace(_raise_and_catch(_outer))
        assert text.startswith("Traceback (most recent call last):")
        assert "ValueError: invalid token" in text

    def test_stack_trace_stops_at_depth_limit(self):
        error: BaseException = ValueError("level 0")
        for level in range(1, 500):
            wrapper = ValueError(f"level {level}")
            wrapper.__cause__ = error
            error = wrapper

        text = jsonlogging.exception_serialization.format_stack_trace(error, depth_limit=3)

        assert text.startswith(jsonlogging.exception_serialization.TRUNCATED_CHAIN_MARKER)
        assert text.count("ValueError: level") == 3
        assert "ValueError: level 499" in text
        assert "ValueError: level 496" not in text

    def test_stack_trace_prints_root_cause_first(self):
        def wrap() -> None:
            try:
                _inner()
            except ValueError as error:
                raise RuntimeError("request failed") from error

        text = jsonlogging.exception_serialization.format_stack_trace(_raise_and_catch(wrap))

        assert text.index("ValueError: invalid token") < text.index("RuntimeError: request failed")
        assert "The above exception was the direct cause of the following exception:" in text

    def test_stack_trace_of_cyclic_chain_terminates(self):
        first = ValueError("first")
        second = RuntimeError("second")
        first.__cause__ = second
        second.__cause__ = first

        text = jsonlogging.exception_serialization.format_stack_trace(first, depth_limit=100)

        assert text.count("ValueError: first") == 1
        assert text.count("RuntimeError: second") == 1
