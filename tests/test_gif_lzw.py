"""
Тесты для gif_lzw.py
"""
import pytest

from gif_builder import lzw_encode
from gif_errors import MalformedFormatError
from gif_lzw import LZWDecoder


def chunks(data: bytes, size: int = 255):
    return [data[i:i + size] for i in range(0, len(data), size)]


def pseudo_random(count: int, modulo: int, seed: int = 12345):
    """Детерминированная последовательность индексов"""
    values = []
    state = seed
    for _ in range(count):
        state = (state * 1103515245 + 12345) & 0x7FFFFFFF
        values.append((state >> 16) % modulo)
    return values


class TestLZWDecoder:
    """Тесты для класса LZWDecoder"""

    def test_decode_simple(self):
        """Тест простой LZW декомпрессии"""
        indices = [1, 1, 1, 1, 2, 2, 3, 0, 1, 2]
        result = LZWDecoder().decode(2, chunks(lzw_encode(indices, 2)), len(indices))
        assert list(result[:len(indices)]) == indices

    def test_decode_repeated_runs(self):
        """Повторяющиеся последовательности (код равен размеру словаря)"""
        indices = [0] * 50 + [1, 0] * 30 + [3] * 20
        result = LZWDecoder().decode(2, chunks(lzw_encode(indices, 2)), len(indices))
        assert list(result[:len(indices)]) == indices

    def test_decode_code_width_growth_and_clear(self):
        """Словарь заполняется до 4096 кодов и очищается посреди потока"""
        indices = pseudo_random(20000, 256)
        data = lzw_encode(indices, 8)
        result = LZWDecoder().decode(8, chunks(data), len(indices))
        assert bytes(result[:len(indices)]) == bytes(indices)

    def test_decode_full_dictionary_without_clear(self):
        """Заполненный словарь без кода clear: декодирование существующими кодами"""
        indices = pseudo_random(30000, 256)
        data = lzw_encode(indices, 8, reset_when_full=False)
        result = LZWDecoder().decode(8, chunks(data), len(indices))
        assert bytes(result[:len(indices)]) == bytes(indices)

    def test_decode_small_sub_blocks(self):
        """Коды, разорванные границами подблоков"""
        indices = pseudo_random(300, 16)
        data = lzw_encode(indices, 4)
        result = LZWDecoder().decode(4, chunks(data, 1), len(indices))
        assert list(result[:len(indices)]) == indices

    def test_decode_empty(self):
        """При пустых данных буфер заполняется нулями"""
        result = LZWDecoder().decode(2, [], 100)
        assert bytes(result[:100]) == bytes(100)

    def test_decode_end_of_information_early(self):
        """Код конца данных до заполнения фрейма"""
        # Коды по 3 бита: clear(4), 2, end(5)
        result = LZWDecoder().decode(2, [b'\x54\x01'], 4)
        assert list(result[:4]) == [2, 0, 0, 0]

    def test_decode_out_of_range_code(self):
        """Код вне словаря завершает фрейм без ошибки"""
        # Коды по 3 бита: clear(4), 1, 7 (словарь содержит только 6 кодов)
        result = LZWDecoder().decode(2, [b'\xcc\x01'], 4)
        assert list(result[:4]) == [1, 0, 0, 0]

    def test_decode_truncated(self):
        """Обрезанные данные дополняются нулями"""
        indices = [(i % 3) + 1 for i in range(100)]
        data = lzw_encode(indices, 2)
        result = LZWDecoder().decode(2, [data[:len(data) // 3]], 100)
        assert result[0] == 1
        assert result[99] == 0

    def test_buffers_reused(self):
        """Буфер индексов переиспользуется между фреймами"""
        decoder = LZWDecoder()
        first = decoder.decode(2, chunks(lzw_encode([1] * 64, 2)), 64)
        second = decoder.decode(2, chunks(lzw_encode([2] * 16, 2)), 16)
        assert first is second
        assert len(second) >= 64
        assert list(second[:16]) == [2] * 16

    def test_decode_zero_pixels(self):
        """Фрейм нулевого размера"""
        result = LZWDecoder().decode(2, chunks(lzw_encode([], 2)), 0)
        assert isinstance(result, bytearray)

    @pytest.mark.parametrize('min_code_size', [0, 12, 255])
    def test_invalid_min_code_size(self, min_code_size):
        """Недопустимый минимальный размер кода"""
        with pytest.raises(MalformedFormatError):
            LZWDecoder().decode(min_code_size, [b'\x00'], 1)
