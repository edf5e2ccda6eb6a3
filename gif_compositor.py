"""
Наложение фреймов на холст с учётом метода утилизации (disposal method).
"""

from typing import List, NamedTuple, Optional, Sequence

from gif_interlace import place

# Методы утилизации предыдущего фрейма
DISPOSAL_NONE = 0
DISPOSAL_LEAVE = 1
DISPOSAL_BACKGROUND = 2
DISPOSAL_PREVIOUS = 3

TRANSPARENT = 0


class FrameRect(NamedTuple):
    """Прямоугольник фрейма на холсте"""
    left: int
    top: int
    width: int
    height: int


class Compositor:
    """Собирает полные кадры размером с холст"""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height

    def blank_canvas(self) -> List[int]:
        return [TRANSPARENT] * (self.width * self.height)

    def base_canvas(self, history: Sequence[Sequence[int]], disposal: int,
                    rect: Optional[FrameRect], fill_color: int) -> List[int]:
        """
        Готовит холст для нового фрейма по методу утилизации предыдущего.

        history - уже собранные кадры (только чтение), rect - прямоугольник
        предыдущего фрейма, fill_color - цвет очистки для метода 2.
        """
        if disposal == DISPOSAL_PREVIOUS:
            # Холст до предыдущего фрейма, т.е. кадр N-2
            if len(history) < 2:
                return self.blank_canvas()
            return list(history[-2])

        if not history:
            return self.blank_canvas()
        canvas = list(history[-1])

        if disposal == DISPOSAL_BACKGROUND and rect is not None:
            self.fill_rect(canvas, rect, fill_color)
        return canvas

    def fill_rect(self, canvas: List[int], rect: FrameRect, color: int):
        """Заливает прямоугольник цветом, обрезая по краям холста"""
        x_end = min(rect.left + rect.width, self.width)
        y_end = min(rect.top + rect.height, self.height)
        if rect.left >= x_end:
            return
        run = [color] * (x_end - rect.left)
        for y in range(rect.top, y_end):
            start = y * self.width + rect.left
            canvas[start:start + len(run)] = run

    def paint(self, canvas: List[int], indices, rect: FrameRect, interlaced: bool,
              color_table: Sequence[int], transparent_index: Optional[int]):
        """Накладывает индексы фрейма на холст"""
        x_end = min(rect.left + rect.width, self.width)
        for frame_row, offset in place(indices, rect.width, rect.height, interlaced):
            y = rect.top + frame_row
            if y >= self.height:
                continue
            row_start = y * self.width
            src = offset - rect.left
            for x in range(rect.left, x_end):
                index = indices[src + x]
                # Пропускаем прозрачные пиксели
                if index == transparent_index:
                    continue
                color = color_table[index]
                # Незаданный слот таблицы цветов не рисуется
                if color:
                    canvas[row_start + x] = color
