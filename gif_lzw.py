"""
LZW декомпрессия данных изображения GIF (LSB-first, переменная ширина кода).
"""

import logging
from typing import Iterable

from gif_errors import MalformedFormatError

logger = logging.getLogger(__name__)

# Максимальное количество кодов словаря (12 бит)
MAX_CODES = 4096


class LZWDecoder:
    """
    Декодер LZW с переиспользуемыми буферами.

    Таблицы префиксов и суффиксов имеют фиксированный размер 4096,
    стек пикселей 4097. Буфер индексов растёт под самый большой фрейм
    и переиспользуется для следующих. Один экземпляр принадлежит одному
    вызову декодирования.
    """

    def __init__(self):
        self.prefix = [0] * MAX_CODES
        self.suffix = bytearray(MAX_CODES)
        self.pixel_stack = bytearray(MAX_CODES + 1)
        self.pixels = bytearray()

    def _ensure_capacity(self, npix: int):
        if len(self.pixels) < npix:
            self.pixels.extend(bytes(npix - len(self.pixels)))

    def decode(self, min_code_size: int, blocks: Iterable[bytes], npix: int) -> bytearray:
        """
        Декодирует npix индексов палитры из цепочки подблоков.

        Возвращает рабочий буфер; значимы первые npix байт. Если данные
        закончились раньше (код конца, код вне словаря, обрыв потока),
        оставшиеся индексы заполняются нулями.
        """
        if not 0 < min_code_size < 12:
            raise MalformedFormatError(f"Неверный минимальный размер кода LZW: {min_code_size}")

        self._ensure_capacity(npix)
        prefix = self.prefix
        suffix = self.suffix
        stack = self.pixel_stack
        pixels = self.pixels

        clear = 1 << min_code_size
        end_of_information = clear + 1
        available = clear + 2
        code_size = min_code_size + 1
        code_mask = (1 << code_size) - 1
        old_code = None
        for code in range(clear):
            prefix[code] = 0
            suffix[code] = code

        blocks = iter(blocks)
        block = b''
        bi = 0
        datum = bits = first = top = pi = 0
        reason = None

        while pi < npix:
            if top == 0:
                if bits < code_size:
                    # Подкачиваем следующий байт, при необходимости следующий подблок
                    if bi >= len(block):
                        block = next(blocks, None)
                        if block is None:
                            reason = "данные закончились"
                            break
                        bi = 0
                        continue
                    datum |= block[bi] << bits
                    bits += 8
                    bi += 1
                    continue

                code = datum & code_mask
                datum >>= code_size
                bits -= code_size

                if code == end_of_information:
                    reason = "код конца данных"
                    break
                if code > available:
                    reason = f"код {code} вне словаря ({available})"
                    break
                if code == clear:
                    code_size = min_code_size + 1
                    code_mask = (1 << code_size) - 1
                    available = clear + 2
                    old_code = None
                    continue

                if old_code is None:
                    # Первый код после clear: только литерал
                    if code >= clear:
                        reason = f"код {code} сразу после очистки словаря"
                        break
                    stack[top] = suffix[code]
                    top += 1
                    old_code = first = code
                    continue

                in_code = code
                if code == available:
                    stack[top] = first
                    top += 1
                    code = old_code
                while code > clear:
                    stack[top] = suffix[code]
                    top += 1
                    code = prefix[code]
                first = suffix[code]
                stack[top] = first
                top += 1

                if available < MAX_CODES:
                    prefix[available] = old_code
                    suffix[available] = first
                    available += 1
                    if available & code_mask == 0 and available < MAX_CODES:
                        code_size += 1
                        code_mask += available
                old_code = in_code

            # Стек хранит цепочку в обратном порядке
            top -= 1
            pixels[pi] = stack[top]
            pi += 1

        if pi < npix:
            logger.warning("LZW: получено %d из %d пикселей (%s), остаток заполнен нулями",
                           pi, npix, reason)
            pixels[pi:npix] = bytes(npix - pi)
        return pixels
