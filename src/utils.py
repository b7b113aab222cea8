from pathlib import Path

import settings


def output_path(output: str, render_type: str, pipeline_name: str, fmt: str) -> Path:
    """
    Куда сохранить результат: если output — директория, имя файла строится
    по шаблону из settings.DEFAULT_OUTPUT_NAMES.
    """
    target = Path(output)
    if target.suffix and not target.is_dir():
        return target

    pattern = settings.DEFAULT_OUTPUT_NAMES.get(render_type, "{name}_" + render_type + ".txt")
    return target / pattern.format(name=pipeline_name, fmt=fmt)
