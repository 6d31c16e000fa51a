class _BaseLedgerException(Exception):
    """
    Base tokenledger exception class.

    This exception is not raised directly. Other exceptions inherit it in
    order to share message and hint formatting.
    """

    def __init__(self, message="Error Message not found.", hint=None):
        """
        Exception initializer.

        Arguments
        ---------
        message : str
            Error message to display with the exception.
        hint : str | Callable[[], str], optional
            Additional guidance appended to the message. May be a callable,
            in which case it is only evaluated when the message is rendered.
        """
        self._message = message
        self._hint = hint
        super().__init__(message)

    @property
    def hint(self):
        # some hints are expensive to compute, so we wait until the last
        # minute when the formatted message is actually requested to compute
        # them.
        if callable(self._hint):
            return self._hint()
        return self._hint

    @property
    def message(self):
        msg = self._message
        if self.hint:
            msg += f"\n\n  (hint: {self.hint})"
        return msg

    def __str__(self):
        return self.message


class LedgerException(_BaseLedgerException):
    pass


class SettingsException(LedgerException):
    """Invalid token configuration."""


class UnknownAccount(LedgerException):
    """Call to an address that holds no ledger."""


class Abort(LedgerException):
    """
    Whole-call rejection.

    Raised by the dispatcher and the ledger operations. Whoever drives the
    call must discard every state change and event the call produced.
    Aborts carry no return data.
    """

    revert_data = b""


class UnknownSelector(Abort):
    """Calldata selector does not match any entry point."""


class CalldataSizeMismatch(Abort):
    """Calldata length does not match the arguments of the entry point."""


class AddressOutOfRange(Abort):
    """Address argument has bits set above bit 160."""


class AmountOutOfRange(Abort):
    """Amount is above the total supply."""


class InsufficientBalance(Abort):
    """Amount exceeds the balance it is debited from."""


class InsufficientAllowance(Abort):
    """Amount exceeds the allowance it is spent from."""


class AllowanceOverwrite(Abort):
    """Non-zero allowance set over an existing non-zero allowance."""


class NonPayableViolation(Abort):
    """Native value attached to a call."""


class LedgerInternalException(_BaseLedgerException):
    """
    Base tokenledger internal exception class.

    This exception is not raised directly, it is subclassed by other internal
    exceptions.

    Internal exceptions are raised as a means of telling the user that an
    internal invariant of the ledger broke, and that filing a bug report
    would be appropriate.
    """

    def __str__(self):
        return (
            f"{super().__str__()}\n\n"
            "This is an unhandled internal ledger error. "
            "Please create an issue to notify the developers!"
        )


class LedgerPanic(LedgerInternalException):
    """General unexpected error in the ledger."""
