"""
Исключения декодера GIF.
"""


class GIFError(ValueError):
    """Базовая ошибка декодирования GIF"""


class MalformedFormatError(GIFError):
    """Поток не является корректным GIF (сигнатура, тег блока, дескриптор)"""


class TruncatedStreamError(GIFError, EOFError):
    """Поток закончился посреди чтения фиксированной длины"""

    def __init__(self, expected: int, received: int, partial: bytes = b''):
        super().__init__(
            f"Неожиданный конец файла: ожидалось {expected} байт, получено {received}"
        )
        self.expected = expected
        self.received = received
        self.partial = partial
