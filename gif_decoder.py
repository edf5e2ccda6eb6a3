"""
Декодер анимированных GIF без использования готовых библиотек.
Читает поток блоков GIF и собирает полные кадры с задержками
и количеством повторов.
"""

import logging
from typing import BinaryIO, List, NamedTuple, Optional, Tuple
from urllib.parse import urlparse
from urllib.request import urlopen

from gif_blocks import BlockReader, read_color_table
from gif_compositor import Compositor, FrameRect, DISPOSAL_LEAVE, DISPOSAL_NONE, TRANSPARENT
from gif_errors import MalformedFormatError
from gif_lzw import LZWDecoder

logger = logging.getLogger(__name__)

IMAGE_SEPARATOR = 0x2C
EXTENSION_INTRODUCER = 0x21
TRAILER = 0x3B

GRAPHIC_CONTROL_LABEL = 0xF9
APPLICATION_LABEL = 0xFF
LOOPING_APPLICATION = b'NETSCAPE2.0'

# Задержка в потоке хранится в сотых долях секунды
DELAY_SCALE = 10
# Количество повторов, если в потоке нет расширения NETSCAPE2.0
PLAY_ONCE = 1

URL_SCHEMES = ('file', 'http', 'https')


class Frame(NamedTuple):
    """
    Полный кадр: пиксели ARGB построчно и задержка.

    Ширину кадр не хранит: все кадры размером с холст, поэтому методам
    передаётся DecodedGIF.width (или используются методы DecodedGIF).
    """
    pixels: Tuple[int, ...]
    delay: int

    def pixel(self, x: int, y: int, width: int) -> int:
        return self.pixels[y * width + x]

    def rows(self, width: int) -> List[Tuple[int, ...]]:
        return [self.pixels[i:i + width] for i in range(0, len(self.pixels), width)]

    def to_rgb(self, width: int) -> List[List[Tuple[int, int, int]]]:
        """Преобразует кадр в матрицу RGB (прозрачные пиксели чёрные)"""
        return [[((c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF) for c in row]
                for row in self.rows(width)]

    def to_rgba_bytes(self) -> bytes:
        data = bytearray(len(self.pixels) * 4)
        for i, c in enumerate(self.pixels):
            data[4 * i:4 * i + 4] = ((c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF, (c >> 24) & 0xFF)
        return bytes(data)


class DecodedGIF(NamedTuple):
    """Результат декодирования"""
    frames: Tuple[Frame, ...]
    width: int
    height: int
    loop_count: int  # 0 - бесконечно

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def duration(self) -> int:
        return sum(frame.delay for frame in self.frames)

    def pixel(self, frame_index: int, x: int, y: int) -> int:
        return self.frames[frame_index].pixel(x, y, self.width)

    def rows(self, frame_index: int) -> List[Tuple[int, ...]]:
        return self.frames[frame_index].rows(self.width)

    def to_rgb(self, frame_index: int) -> List[List[Tuple[int, int, int]]]:
        return self.frames[frame_index].to_rgb(self.width)


class GraphicControl:
    """Состояние Graphic Control Extension, действует до следующего расширения"""

    def __init__(self):
        self.disposal = DISPOSAL_LEAVE
        self.transparency = False
        self.transparent_index = 0
        self.delay = 0

    @property
    def active_transparent_index(self) -> Optional[int]:
        return self.transparent_index if self.transparency else None


class DecodeContext:
    """Изменяемое состояние одного вызова декодирования"""

    def __init__(self, reader: BlockReader):
        self.reader = reader
        self.lzw = LZWDecoder()
        self.control = GraphicControl()
        self.frames: List[Frame] = []
        self.loop_count = PLAY_ONCE

        self.width = 0
        self.height = 0
        self.global_color_table: Optional[List[int]] = None
        self.background_index = 0
        self.background_color = 0
        self.compositor: Optional[Compositor] = None

        # Сведения о предыдущем фрейме для метода утилизации
        self.last_disposal = DISPOSAL_NONE
        self.last_rect: Optional[FrameRect] = None
        self.last_background_color = 0


class GIFDecoder:
    """Декодер потока GIF"""

    def decode(self, stream: BinaryIO) -> DecodedGIF:
        """Декодирует весь поток и возвращает кадры"""
        ctx = DecodeContext(BlockReader(stream))
        self.parse_header(ctx)

        while True:
            tag = ctx.reader.read_tag()
            if tag is None:
                logger.warning("Поток закончился без трейлера, кадров: %d", len(ctx.frames))
                break
            if tag == IMAGE_SEPARATOR:
                self.parse_image(ctx)
            elif tag == EXTENSION_INTRODUCER:
                self.parse_extension(ctx)
            elif tag == TRAILER:
                break
            else:
                raise MalformedFormatError(f"Неизвестный тег блока: 0x{tag:02X}")

        logger.debug("Декодировано кадров: %d, повторов: %d", len(ctx.frames), ctx.loop_count)
        return DecodedGIF(tuple(ctx.frames), ctx.width, ctx.height, ctx.loop_count)

    def parse_header(self, ctx: DecodeContext):
        """Парсит сигнатуру, логический экран и глобальную таблицу цветов"""
        reader = ctx.reader
        signature = reader.read_bytes(6)
        if not signature.startswith(b'GIF'):
            raise MalformedFormatError(f"Неверная сигнатура GIF: {signature!r}")

        ctx.width = reader.read_uint16_le()
        ctx.height = reader.read_uint16_le()
        packed = reader.read_byte()
        ctx.background_index = reader.read_byte()
        reader.read_byte()  # pixel_aspect_ratio (не используется)

        if packed & 0x80:
            ctx.global_color_table = read_color_table(reader, 2 << (packed & 0x07))
            ctx.background_color = ctx.global_color_table[ctx.background_index]

        ctx.compositor = Compositor(ctx.width, ctx.height)
        logger.debug("Заголовок %r: %dx%d, глобальная таблица: %s",
                     signature, ctx.width, ctx.height, ctx.global_color_table is not None)

    def parse_extension(self, ctx: DecodeContext):
        """Разбирает расширение по его метке"""
        reader = ctx.reader
        label = reader.read_byte()
        logger.debug("Расширение 0x%02X", label)
        if label == GRAPHIC_CONTROL_LABEL:
            self.parse_graphic_control_extension(ctx)
        elif label == APPLICATION_LABEL:
            self.parse_application_extension(ctx)
        else:
            reader.skip_blocks()

    def parse_graphic_control_extension(self, ctx: DecodeContext):
        reader = ctx.reader
        block = reader.read_block()
        if len(block) < 4:
            # Некорректный блок: пропускаем, состояние не меняется
            logger.warning("Graphic Control Extension с размером блока %d", len(block))
            if reader.block_size:
                reader.skip_blocks()
            return

        control = ctx.control
        packed = block[0]
        control.disposal = (packed & 0x1C) >> 2 or DISPOSAL_LEAVE
        control.transparency = bool(packed & 0x01)
        control.delay = (block[1] | (block[2] << 8)) * DELAY_SCALE
        control.transparent_index = block[3]
        reader.skip_blocks()

    def parse_application_extension(self, ctx: DecodeContext):
        reader = ctx.reader
        identifier = reader.read_block()
        if reader.block_size == 0:
            return
        if identifier[:11] != LOOPING_APPLICATION:
            reader.skip_blocks()
            return

        while True:
            block = reader.read_block()
            if reader.block_size == 0:
                break
            if len(block) >= 3 and block[0] == 1:
                ctx.loop_count = block[1] | (block[2] << 8)
                logger.debug("Количество повторов: %d", ctx.loop_count)

    def parse_image(self, ctx: DecodeContext):
        """Парсит дескриптор изображения, распаковывает и собирает кадр"""
        reader = ctx.reader
        rect = FrameRect(
            reader.read_uint16_le(),
            reader.read_uint16_le(),
            reader.read_uint16_le(),
            reader.read_uint16_le(),
        )
        packed = reader.read_byte()
        interlaced = bool(packed & 0x40)

        control = ctx.control
        if packed & 0x80:
            color_table = read_color_table(reader, 2 << (packed & 0x07))
        else:
            color_table = ctx.global_color_table
            # Фон обнуляется только при включённой прозрачности
            if control.transparency and control.transparent_index == ctx.background_index:
                ctx.background_color = TRANSPARENT
        if color_table is None:
            raise MalformedFormatError("Нет ни глобальной, ни локальной таблицы цветов")

        min_code_size = reader.read_byte()
        blocks = reader.data_blocks()
        indices = ctx.lzw.decode(min_code_size, blocks, rect.width * rect.height)
        # Дочитываем оставшиеся подблоки до терминатора
        for _ in blocks:
            pass

        canvas = ctx.compositor.base_canvas(
            [frame.pixels for frame in ctx.frames[-2:]],
            ctx.last_disposal,
            ctx.last_rect,
            TRANSPARENT if control.transparency else ctx.last_background_color,
        )
        ctx.compositor.paint(canvas, indices, rect, interlaced, color_table,
                             control.active_transparent_index)
        ctx.frames.append(Frame(tuple(canvas), control.delay))
        logger.debug("Кадр %d: %s, чересстрочный: %s, задержка: %d",
                     len(ctx.frames) - 1, rect, interlaced, control.delay)

        ctx.last_disposal = control.disposal
        ctx.last_rect = rect
        ctx.last_background_color = ctx.background_color


def decode(stream: BinaryIO) -> DecodedGIF:
    """Декодирует GIF из открытого бинарного потока"""
    return GIFDecoder().decode(stream)


def read_gif(name: str) -> DecodedGIF:
    """Декодирует GIF по пути к файлу или URL (file:, http:, https:)"""
    name = name.strip()
    if urlparse(name).scheme in URL_SCHEMES:
        with urlopen(name) as stream:
            return decode(stream)
    with open(name, 'rb') as stream:
        return decode(stream)
