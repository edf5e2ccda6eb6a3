"""
Flask веб-приложение для извлечения кадров из GIF файлов
"""

import base64
from io import BytesIO

from flask import Flask, request, jsonify, send_file

from gif_decoder import decode
from gif_errors import GIFError
from png_writer import PNGWriter

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB максимум


def decode_upload():
    """Декодирует загруженный файл; возвращает (gif, None) или (None, ответ с ошибкой)"""
    if 'file' not in request.files:
        return None, (jsonify({'error': 'Файл не загружен'}), 400)

    file = request.files['file']
    if file.filename == '':
        return None, (jsonify({'error': 'Файл не выбран'}), 400)

    try:
        return decode(file.stream), None
    except GIFError as e:
        app.logger.warning("Некорректный GIF %s: %s", file.filename, e)
        return None, (jsonify({'error': f'Ошибка парсинга: {e}'}), 422)


def requested_frame(gif):
    """Проверяет frame_index из формы; возвращает (индекс, None) или (None, ответ с ошибкой)"""
    frame_index = request.form.get('frame_index', type=int)
    if frame_index is None:
        return None, (jsonify({'error': 'Не указан номер фрейма'}), 400)
    if frame_index < 0 or frame_index >= gif.frame_count:
        return None, (jsonify({'error': f'Неверный номер фрейма. Доступно: 0-{gif.frame_count - 1}'}), 400)
    return frame_index, None


def frame_data_url(gif, frame_index: int) -> str:
    png = PNGWriter.from_frame(gif.frames[frame_index], gif.width, gif.height).to_bytes()
    return f"data:image/png;base64,{base64.b64encode(png).decode('utf-8')}"


@app.route('/api/info', methods=['POST'])
def get_gif_info():
    """Информация о GIF: количество кадров, размер, повторы, задержки"""
    gif, error = decode_upload()
    if error:
        return error
    return jsonify({
        'frame_count': gif.frame_count,
        'width': gif.width,
        'height': gif.height,
        'loop_count': gif.loop_count,
        'delays': [frame.delay for frame in gif.frames],
    })


@app.route('/api/preload', methods=['POST'])
def preload_all_frames():
    """Возвращает все кадры в base64"""
    gif, error = decode_upload()
    if error:
        return error
    try:
        frames = [frame_data_url(gif, i) for i in range(gif.frame_count)]
    except Exception:
        app.logger.exception("Ошибка предзагрузки фреймов")
        return jsonify({'error': 'Ошибка обработки'}), 500
    return jsonify({'frames': frames, 'frame_count': gif.frame_count})


@app.route('/api/extract', methods=['POST'])
def extract_frame():
    """Отдаёт указанный кадр как PNG"""
    gif, error = decode_upload()
    if error:
        return error
    frame_index, error = requested_frame(gif)
    if error:
        return error

    png = PNGWriter.from_frame(gif.frames[frame_index], gif.width, gif.height).to_bytes()
    return send_file(
        BytesIO(png),
        mimetype='image/png',
        as_attachment=True,
        download_name=f'frame_{frame_index}.png'
    )


@app.route('/api/preview', methods=['POST'])
def preview_frame():
    """Возвращает превью кадра в base64"""
    gif, error = decode_upload()
    if error:
        return error
    frame_index, error = requested_frame(gif)
    if error:
        return error

    return jsonify({
        'image': frame_data_url(gif, frame_index),
        'frame_index': frame_index,
        'delay': gif.frames[frame_index].delay,
    })


if __name__ == '__main__':
    # Для Docker используем 0.0.0.0, чтобы принимать подключения извне
    app.run(debug=True, host='0.0.0.0', port=5000)
