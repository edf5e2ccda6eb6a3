"""
Чтение байтового потока GIF: примитивы фиксированной длины,
подблоки с префиксом длины и таблицы цветов.
"""

import logging
import struct
from typing import BinaryIO, Iterator, List, Optional

from gif_errors import TruncatedStreamError

logger = logging.getLogger(__name__)

# Количество слотов в таблице цветов; незаданные слоты остаются 0
COLOR_TABLE_SLOTS = 256
OPAQUE = 0xFF000000


class BlockReader:
    """Последовательное чтение потока GIF (только вперёд, без seek)"""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.block_size = 0  # Длина последнего прочитанного подблока

    def read_bytes(self, count: int) -> bytes:
        """Читает ровно count байт"""
        data = self.stream.read(count)
        # Сетевые потоки могут вернуть меньше, чем запрошено
        while data is not None and 0 < len(data) < count:
            chunk = self.stream.read(count - len(data))
            if not chunk:
                break
            data += chunk
        if data is None or len(data) < count:
            data = bytes(data or b'')
            raise TruncatedStreamError(count, len(data), data)
        return data

    def read_byte(self) -> int:
        """Читает один байт"""
        return self.read_bytes(1)[0]

    def read_uint16_le(self) -> int:
        """Читает 16-битное беззнаковое число (little-endian)"""
        return struct.unpack('<H', self.read_bytes(2))[0]

    def read_tag(self) -> Optional[int]:
        """Читает тег блока; None означает чистый конец потока"""
        data = self.stream.read(1)
        if not data:
            return None
        return data[0]

    def read_block(self) -> bytes:
        """Читает один подблок: байт длины и столько же байт данных"""
        self.block_size = self.read_byte()
        if self.block_size == 0:
            return b''
        return self.read_bytes(self.block_size)

    def skip_blocks(self):
        """Пропускает цепочку подблоков до терминатора"""
        while True:
            self.read_block()
            if self.block_size == 0:
                break

    def data_blocks(self) -> Iterator[bytes]:
        """
        Отдаёт подблоки сжатых данных до терминатора.

        Обрыв потока здесь не является ошибкой: отдаётся то, что успели
        прочитать, и итерация заканчивается.
        """
        while True:
            try:
                block = self.read_block()
            except TruncatedStreamError as e:
                logger.warning("Данные изображения обрываются: %s", e)
                # Цепочку дальше читать нечего
                self.block_size = 0
                if e.partial:
                    yield e.partial
                return
            if self.block_size == 0:
                return
            yield block


def read_color_table(reader: BlockReader, count: int) -> List[int]:
    """
    Читает таблицу из count цветов RGB.

    Возвращает 256 слотов: каждый цвет упакован в 0xFFRRGGBB,
    слоты за пределами таблицы равны 0.
    """
    raw = reader.read_bytes(3 * count)
    table = [0] * max(COLOR_TABLE_SLOTS, count)
    for i in range(count):
        r, g, b = raw[3 * i], raw[3 * i + 1], raw[3 * i + 2]
        table[i] = OPAQUE | (r << 16) | (g << 8) | b
    return table
