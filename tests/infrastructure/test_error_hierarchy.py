import pytest

from softrefs.errors import (
    DuplicateKeyError,
    EntryNotFoundError,
    InvalidArgumentError,
    PolicyError,
    PolicyValidationError,
    SoftRefError,
    require,
)


@pytest.mark.parametrize(
    "error_cls, builtin",
    [
        (InvalidArgumentError, ValueError),
        (DuplicateKeyError, ValueError),
        (EntryNotFoundError, KeyError),
        (PolicyValidationError, ValueError),
    ],
)
def test_errors_extend_builtins(error_cls, builtin):
    assert issubclass(error_cls, SoftRefError)
    assert issubclass(error_cls, builtin)


def test_policy_validation_is_policy_error():
    assert issubclass(PolicyValidationError, PolicyError)
    assert issubclass(PolicyValidationError, InvalidArgumentError)


def test_entry_not_found_message_is_not_quoted():
    assert str(EntryNotFoundError("key 'a' not found")) == "key 'a' not found"


def test_require():
    require(0, "zero")
    with pytest.raises(InvalidArgumentError, match="item cannot be None"):
        require(None, "item")
