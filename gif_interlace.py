"""
Порядок строк фрейма с учётом чересстрочной развёртки.
"""

from typing import Iterator, List, Tuple

# (начальная строка, шаг) для четырёх проходов
INTERLACE_PASSES = (
    (0, 8),  # Проход 1: строки 0, 8, 16, ...
    (4, 8),  # Проход 2: строки 4, 12, 20, ...
    (2, 4),  # Проход 3: строки 2, 6, 10, ...
    (1, 2),  # Проход 4: строки 1, 3, 5, ...
)


def row_order(height: int, interlaced: bool) -> List[int]:
    """Возвращает строку фрейма для каждой строки распакованных данных"""
    if not interlaced:
        return list(range(height))
    rows = []
    for start, step in INTERLACE_PASSES:
        rows.extend(range(start, height, step))
    return rows


def place(indices, width: int, height: int, interlaced: bool) -> Iterator[Tuple[int, int]]:
    """
    Сопоставляет строки распакованного буфера строкам фрейма.

    Отдаёт пары (строка фрейма, смещение строки в indices).
    """
    if len(indices) < width * height:
        raise ValueError("Буфер индексов меньше размера фрейма")
    for source_row, frame_row in enumerate(row_order(height, interlaced)):
        yield frame_row, source_row * width
