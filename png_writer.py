"""
Запись кадров GIF в PNG без использования готовых библиотек.
Кадр сохраняется как RGBA (тип цвета 6), прозрачность сохраняется.
"""

import struct
import zlib

from gif_decoder import Frame


class PNGWriter:
    """Класс для записи кадра в PNG"""

    PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

    def __init__(self, width: int, height: int, rgba_data: bytes):
        if len(rgba_data) != width * height * 4:
            raise ValueError("Размер данных RGBA не совпадает с размером изображения")
        self.width = width
        self.height = height
        self.rgba_data = rgba_data

    @classmethod
    def from_frame(cls, frame: Frame, width: int, height: int) -> 'PNGWriter':
        return cls(width, height, frame.to_rgba_bytes())

    def create_chunk(self, chunk_type: bytes, chunk_data: bytes) -> bytes:
        """Создаёт PNG chunk с контрольной суммой CRC32"""
        crc = zlib.crc32(chunk_type + chunk_data) & 0xFFFFFFFF
        return struct.pack('>I', len(chunk_data)) + chunk_type + chunk_data + struct.pack('>I', crc)

    def create_ihdr_chunk(self) -> bytes:
        # 8 бит на канал, RGBA, deflate, без фильтра, без чередования
        data = struct.pack('>IIBBBBB', self.width, self.height, 8, 6, 0, 0, 0)
        return self.create_chunk(b'IHDR', data)

    def prepare_image_data(self) -> bytes:
        """Добавляет байт фильтра None (0) перед каждой строкой"""
        stride = self.width * 4
        image_data = bytearray()
        for y in range(self.height):
            image_data.append(0)
            image_data.extend(self.rgba_data[y * stride:(y + 1) * stride])
        return bytes(image_data)

    def to_bytes(self) -> bytes:
        return b''.join((
            self.PNG_SIGNATURE,
            self.create_ihdr_chunk(),
            self.create_chunk(b'IDAT', zlib.compress(self.prepare_image_data(), level=6)),
            self.create_chunk(b'IEND', b''),
        ))

    def write(self, file_path: str):
        """Записывает PNG файл"""
        with open(file_path, 'wb') as f:
            f.write(self.to_bytes())
