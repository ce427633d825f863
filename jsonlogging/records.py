"""
Separation of ``Label`` and ``StructuredParameter`` arguments from log records.

A logging call mixes plain interpolation arguments with labels and
structured parameters::

    logger.info("Request rejected: %s.", reason, Label.of("requestId", request_id))

Left in ``record.args``, the ``Label`` would break every other handler on
the same record: ``LogRecord.getMessage`` runs ``msg % args`` and fails
with "not all arguments converted".  ``install_record_factory`` wraps
the process-wide LogRecord factory so that, as each record is created,
labels and parameters move into their own record attributes and
``record.args`` keeps only the plain arguments.

``configure_logging`` installs the factory.  ``CloudLoggingFormatter``
reads both the record attributes and any labels still in ``record.args``,
so records built by hand work as well.
"""

import collections.abc
import logging
import typing

import jsonlogging.labels
import jsonlogging.parameters

LABELS_ATTRIBUTE = "jsonlogging_labels"
PARAMETERS_ATTRIBUTE = "jsonlogging_parameters"


class CloudLoggingRecordFactory:
    """LogRecord factory that moves labels and parameters out of ``args``."""

    def __init__(self, wrapped_factory: collections.abc.Callable[..., logging.LogRecord]) -> None:
        self._wrapped_factory = wrapped_factory

    @property
    def wrapped_factory(self) -> collections.abc.Callable[..., logging.LogRecord]:
        return self._wrapped_factory

    def __call__(self, *args: typing.Any, **kwargs: typing.Any) -> logging.LogRecord:
        record = self._wrapped_factory(*args, **kwargs)
        separate_structured_arguments(record)
        return record


def install_record_factory() -> CloudLoggingRecordFactory:
    """
    Install ``CloudLoggingRecordFactory`` around the current LogRecord factory.

    Installing twice keeps the first installation.
    """
    current_factory = logging.getLogRecordFactory()
    if isinstance(current_factory, CloudLoggingRecordFactory):
        return current_factory
    record_factory = CloudLoggingRecordFactory(current_factory)
    logging.setLogRecordFactory(record_factory)
    return record_factory


def uninstall_record_factory() -> None:
    """Restore the factory that ``install_record_factory`` wrapped."""
    current_factory = logging.getLogRecordFactory()
    if isinstance(current_factory, CloudLoggingRecordFactory):
        logging.setLogRecordFactory(current_factory.wrapped_factory)


def separate_structured_arguments(record: logging.LogRecord) -> None:
    """Move labels and parameters in ``record.args`` into record attributes."""
    plain_arguments, labels, parameters = partition_arguments(record.args)
    if not labels and not parameters:
        return

    record.args = _as_record_arguments(plain_arguments)
    setattr(record, LABELS_ATTRIBUTE, (*record_labels(record), *labels))
    setattr(record, PARAMETERS_ATTRIBUTE, (*record_parameters(record), *parameters))


def partition_arguments(
    arguments: typing.Any,
) -> tuple[
    tuple[typing.Any, ...] | collections.abc.Mapping[str, typing.Any],
    list[jsonlogging.labels.Label],
    list[jsonlogging.parameters.StructuredParameter],
]:
    """
    Split logging call arguments into plain arguments, labels and
    structured parameters, each in argument order.
    """
    # LogRecord unwraps a lone mapping argument for %(name)s templates.
    if isinstance(arguments, collections.abc.Mapping):
        return arguments, [], []
    if arguments is None:
        return (), [], []
    if not isinstance(arguments, tuple):
        arguments = (arguments,)

    plain_arguments: list[typing.Any] = []
    labels: list[jsonlogging.labels.Label] = []
    parameters: list[jsonlogging.parameters.StructuredParameter] = []
    for argument in arguments:
        if isinstance(argument, jsonlogging.labels.Label):
            labels.append(argument)
        elif isinstance(argument, jsonlogging.parameters.StructuredParameter):
            parameters.append(argument)
        else:
            plain_arguments.append(argument)
    return tuple(plain_arguments), labels, parameters


def record_labels(record: logging.LogRecord) -> tuple[jsonlogging.labels.Label, ...]:
    """The labels already moved onto ``record``."""
    labels = getattr(record, LABELS_ATTRIBUTE, ())
    return tuple(labels) if isinstance(labels, (tuple, list)) else ()


def record_parameters(record: logging.LogRecord) -> tuple[jsonlogging.parameters.StructuredParameter, ...]:
    """The structured parameters already moved onto ``record``."""
    parameters = getattr(record, PARAMETERS_ATTRIBUTE, ())
    return tuple(parameters) if isinstance(parameters, (tuple, list)) else ()


def _as_record_arguments(
    plain_arguments: tuple[typing.Any, ...] | collections.abc.Mapping[str, typing.Any],
) -> tuple[typing.Any, ...] | collections.abc.Mapping[str, typing.Any]:
    # Same unwrapping LogRecord.__init__ applies to a lone non-empty mapping.
    if (
        isinstance(plain_arguments, tuple)
        and len(plain_arguments) == 1
        and isinstance(plain_arguments[0], collections.abc.Mapping)
        and plain_arguments[0]
    ):
        return plain_arguments[0]
    return plain_arguments
