"""
Сборка GIF в памяти для тестов (простой LZW кодировщик).
"""

from typing import List, Optional, Sequence, Tuple

TRAILER = b'\x3b'


def color(rgb: Tuple[int, int, int]) -> int:
    """Цвет RGB в том виде, в каком его отдаёт декодер"""
    r, g, b = rgb
    return 0xFF000000 | (r << 16) | (g << 8) | b


def table_bits(count: int) -> int:
    """Значение поля размера таблицы: 2 << bits >= count"""
    bits = 0
    while (2 << bits) < count:
        bits += 1
    return bits


def color_table(palette: Sequence[Tuple[int, int, int]]) -> bytes:
    size = 2 << table_bits(len(palette))
    data = bytearray()
    for r, g, b in list(palette) + [(0, 0, 0)] * (size - len(palette)):
        data.extend((r, g, b))
    return bytes(data)


def lzw_codes(indices: Sequence[int], min_code_size: int, reset_when_full: bool = True):
    """
    Генерирует пары (код, длина кода).

    При reset_when_full=False заполненный словарь (4096 кодов) не очищается:
    кодирование продолжается существующими кодами.
    """
    clear = 1 << min_code_size
    end = clear + 1

    def reset():
        return {bytes((i,)): i for i in range(clear)}, clear + 2, min_code_size + 1

    table, next_code, width = reset()
    yield clear, width

    entry = b''
    for index in indices:
        candidate = entry + bytes((index,))
        if candidate in table:
            entry = candidate
            continue
        yield table[entry], width
        if next_code < 4096:
            table[candidate] = next_code
            if next_code == (1 << width) and width < 12:
                width += 1
            next_code += 1
            if next_code == 4096 and reset_when_full:
                yield clear, width
                table, next_code, width = reset()
        entry = bytes((index,))

    if entry:
        yield table[entry], width
    yield end, width


def lzw_encode(indices: Sequence[int], min_code_size: int, reset_when_full: bool = True) -> bytes:
    """Сжатые данные без разбиения на подблоки"""
    data = bytearray()
    acc = 0
    acc_len = 0
    for code, width in lzw_codes(indices, min_code_size, reset_when_full):
        acc |= code << acc_len
        acc_len += width
        while acc_len >= 8:
            data.append(acc & 0xFF)
            acc >>= 8
            acc_len -= 8
    if acc_len:
        data.append(acc & 0xFF)
    return bytes(data)


def sub_blocks(data: bytes, size: int = 255) -> bytes:
    """Разбивает данные на подблоки и добавляет терминатор"""
    out = bytearray()
    for i in range(0, len(data), size):
        chunk = data[i:i + size]
        out.append(len(chunk))
        out.extend(chunk)
    out.append(0)
    return bytes(out)


def header(width: int, height: int, palette: Optional[Sequence[Tuple[int, int, int]]] = None,
           background_index: int = 0, signature: bytes = b'GIF89a') -> bytes:
    """Сигнатура, логический экран и глобальная таблица цветов"""
    packed = 0
    table = b''
    if palette:
        packed = 0x80 | table_bits(len(palette))
        table = color_table(palette)
    return (signature + width.to_bytes(2, 'little') + height.to_bytes(2, 'little')
            + bytes((packed, background_index, 0)) + table)


def graphic_control(disposal: int = 0, transparent_index: Optional[int] = None, delay: int = 0) -> bytes:
    packed = (disposal << 2) | (1 if transparent_index is not None else 0)
    return (b'\x21\xf9\x04' + bytes((packed,)) + delay.to_bytes(2, 'little')
            + bytes((transparent_index or 0, 0)))


def netscape_loop(count: int) -> bytes:
    return b'\x21\xff\x0bNETSCAPE2.0\x03\x01' + count.to_bytes(2, 'little') + b'\x00'


def comment(text: bytes) -> bytes:
    return b'\x21\xfe' + sub_blocks(text)


def image_block(indices: Sequence[int], width: int, height: int, left: int = 0, top: int = 0,
                palette: Optional[Sequence[Tuple[int, int, int]]] = None,
                interlaced: bool = False, min_code_size: int = 2,
                block_size: int = 255) -> bytes:
    """Дескриптор изображения, локальная таблица и сжатые данные"""
    packed = 0x40 if interlaced else 0
    table = b''
    if palette:
        packed |= 0x80 | table_bits(len(palette))
        table = color_table(palette)
    descriptor = b'\x2c' + b''.join(v.to_bytes(2, 'little') for v in (left, top, width, height))
    return (descriptor + bytes((packed,)) + table + bytes((min_code_size,))
            + sub_blocks(lzw_encode(indices, min_code_size), block_size))


def solid(index: int, width: int, height: int) -> List[int]:
    return [index] * (width * height)
