from cpush.core.errors import ErrorCode


def test_sysexits_values_are_stable() -> None:
    assert ErrorCode.OK == 0
    assert ErrorCode.USAGE == 64
    assert ErrorCode.NO_USER == 67
    assert ErrorCode.SOFTWARE == 70
    assert ErrorCode.CONFIG == 78


def test_str_is_human_readable() -> None:
    assert str(ErrorCode.NO_USER) == "no user"


def test_success_flags() -> None:
    assert ErrorCode.OK.is_success
    assert ErrorCode.SOFTWARE.is_error
