import settings
import click

from core.config import load_shared_config
from core.config_loader import ConfigLoader
from core.core import Pipe2CloudCore
from core.presets import PRESETS
from exception import ConfigurationError
from utils import output_path


@click.command()
@click.option("--type", "render_type", default="cloudformation",
              type=click.Choice(["cloudformation", "diagram"]), help="Что генерировать")
@click.option("--format", "fmt", default="yaml", type=click.Choice(["yaml", "json"]),
              help="Формат CloudFormation-шаблона")
@click.option("--from-git", "repo_path", default=None,
              help="Взять owner/repo/branch из локального git-клона")
@click.option("-o", "--output", default=".", help="Путь к директории или файлу, куда сохранить результат")
@click.option("--list-presets", is_flag=True, help="Показать встроенные пресеты и выйти")
@click.argument("pipeline", required=False)
def main(pipeline: str, render_type: str, fmt: str, repo_path: str, output: str, list_presets: bool):
    """
    PIPELINE — имя пресета или путь до YAML-описания пайплайна.
    """
    if list_presets:
        for name, preset in sorted(PRESETS.items()):
            click.echo(f"{name}\t{preset['variant']}")
        return

    if not pipeline:
        raise click.UsageError("Укажите PIPELINE (пресет или YAML-файл) или --list-presets")

    click.echo(settings.LOGO + "\n", err=True)

    config = load_shared_config()
    try:
        request = ConfigLoader.load(pipeline, config)
    except ConfigurationError as e:
        raise click.ClickException(e.description)

    pipe2cloud = Pipe2CloudCore(config)
    result = pipe2cloud.create_pipeline(
        request,
        render_type=render_type,
        fmt=fmt,
        repo_path=repo_path,
    )

    for warning in result.warnings:
        click.echo(f"warning: {warning}", err=True)

    template = result.ci_templates.get(render_type)
    if result.status != "ok" or not template:
        raise click.ClickException(
            f"Пайплайн {pipeline!r} не сгенерирован. "
            f"Доступные результаты: {list(result.ci_templates.keys())}"
        )

    click.echo(template)
    click.echo(result.pipeline_summary.description, err=True)

    target = output_path(output, render_type, result.pipeline_summary.pipeline_name, fmt)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(template)
    except OSError as e:
        click.echo(f"Не удалось сохранить результат в файл '{target}': {e}", err=True)
    else:
        click.echo(f"Результат сохранён в файл: {target}", err=True)


if __name__ == "__main__":
    main()
