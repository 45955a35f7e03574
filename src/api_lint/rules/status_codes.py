"""Use standard HTTP status codes.

Response codes must be registered HTTP status codes, should be the ones
conventionally used with the operation's method, and ``204 No Content``
responses must not declare a body.
"""

from collections.abc import Callable
from http import HTTPStatus

from api_lint.context.base import Context, Operation
from api_lint.core.violation import Violation

from .base import Rule

DEFAULT_CODE = "default"
NO_CONTENT_CODE = str(HTTPStatus.NO_CONTENT.value)

# IANA HTTP status code registry, assigned codes only (306 is unused)
STANDARDIZED_CODES = frozenset(str(code) for code in (
    100, 101, 102, 103,
    200, 201, 202, 203, 204, 205, 206, 207, 208, 226,
    300, 301, 302, 303, 304, 305, 307, 308,
    400, 401, 402, 403, 404, 405, 406, 407, 408, 409, 410, 411, 412, 413, 414, 415, 416, 417, 418,
    421, 422, 423, 424, 425, 426, 428, 429, 431, 451,
    500, 501, 502, 503, 504, 505, 506, 507, 508, 510, 511,
))

_WELL_UNDERSTOOD_FOR_ALL = (
    "200", "301", "400", "401", "403", "404", "405", "406", "408", "410", "428", "429",
    "500", "501", "503",
)

WELL_UNDERSTOOD_CODES: dict[str, frozenset[str]] = {
    "ALL": frozenset(_WELL_UNDERSTOOD_FOR_ALL),
    "GET": frozenset(("304",) + _WELL_UNDERSTOOD_FOR_ALL),
    "POST": frozenset(("201", "202", "207", "303", "415") + _WELL_UNDERSTOOD_FOR_ALL),
    "PUT": frozenset(("201", "202", "204", "303", "409", "412", "415", "423") + _WELL_UNDERSTOOD_FOR_ALL),
    "PATCH": frozenset(("202", "204", "303", "409", "412", "415", "423") + _WELL_UNDERSTOOD_FOR_ALL),
    "DELETE": frozenset(("202", "204", "303", "409", "412", "415", "423") + _WELL_UNDERSTOOD_FOR_ALL),
}

ALL_WELL_UNDERSTOOD_CODES = frozenset().union(*WELL_UNDERSTOOD_CODES.values())


def well_understood_violation_message(path: str, code: str, method: str) -> str:
    return f"{code} is not a well-understood response code for method {method} on path {path}"


def no_content_violation_message(code: str) -> str:
    return f"{code} No Content response must not define a response body"


class UseStandardHttpStatusCodesRule(Rule):
    rule_id = "use-standard-http-status-codes"
    title = "Use Standard HTTP Status Codes"

    def check(self, context: Context) -> list[Violation]:
        return (
            self.check_standardized_codes(context)
            + self.check_well_understood_codes(context)
            + self.check_well_understood_codes_usage(context)
            + self.check_no_content_has_no_body(context)
        )

    def check_standardized_codes(self, context: Context) -> list[Violation]:
        return _response_violations(
            context,
            lambda op, code: code in STANDARDIZED_CODES,
            lambda op, code: f"{code} is not a standardized response code",
        )

    def check_well_understood_codes(self, context: Context) -> list[Violation]:
        """Flag codes not well-understood for any method."""
        return _response_violations(
            context,
            lambda op, code: code in ALL_WELL_UNDERSTOOD_CODES,
            lambda op, code: f"{code} is not a well-understood response code",
        )

    def check_well_understood_codes_usage(self, context: Context) -> list[Violation]:
        """Flag codes not well-understood for the operation's method."""
        return _response_violations(
            context,
            lambda op, code: code in _well_understood_for(op.method),
            lambda op, code: well_understood_violation_message(op.path, code, op.method.upper()),
        )

    def check_no_content_has_no_body(self, context: Context) -> list[Violation]:
        violations = []
        for operation in context.operations():
            for response in context.responses(operation):
                if response.code == NO_CONTENT_CODE and context.response_has_content(response):
                    violations.append(Violation(
                        description=no_content_violation_message(response.code),
                        pointer=response.pointer,
                    ))
        return violations


def _well_understood_for(method: str) -> frozenset[str]:
    return WELL_UNDERSTOOD_CODES.get(method.upper(), WELL_UNDERSTOOD_CODES["ALL"])


def _response_violations(
    context: Context,
    is_allowed: Callable[[Operation, str], bool],
    message: Callable[[Operation, str], str],
) -> list[Violation]:
    violations = []
    for operation in context.operations():
        for response in context.responses(operation):
            if response.code == DEFAULT_CODE or is_allowed(operation, response.code):
                continue
            violations.append(Violation(description=message(operation, response.code), pointer=response.pointer))
    return violations
