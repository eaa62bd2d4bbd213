## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘


class StackLangError(Exception):
    def __init__(self, message: str = "", *, token=None, line=None, state=None):
        """Base class for all errors raised while running a program."""
        super().__init__(message)
        self.token: str = token
        self.line: int = line
        self.state: object = state

class StackLangParseError(StackLangError):
    def __init__(self, message, *, line=None, column=None, token=None):
        super().__init__(message, token=token, line=line)
        self.column = column

class StackLangRuntimeError(StackLangError, RuntimeError):
    pass


class StackUnderflowError(StackLangError, IndexError):
    """Popping a value when the operand stack is empty."""
    pass

class BlockStackUnderflowError(StackLangError, IndexError):
    """Closing a block with `}` when no `{` is open."""
    pass

class UndefinedOperatorError(StackLangError, NameError):
    pass

class TypeMismatchError(StackLangError, TypeError):
    """Runtime type exceptions found by checking the values popped from the stack."""
    def __init__(self, message: str = "", *, token=None, line=None, state=None, values=()):
        super().__init__(message, token=token, line=line, state=state)
        self.values = tuple(values)
