import argparse
import dataclasses
from typing import Any

from folio.cli import (
    STAGES,
    autodetect_input,
    autodetect_output,
    effective_config,
    parse_config_kwargs,
    render,
)
from folio.config import FolioConfig


def wrap_render(args: Any) -> None:
    config_kwargs = parse_config_kwargs(args.config_args)
    output_dir = autodetect_output(args.output_dir)
    for input_arg in args.inputs:
        input_params = autodetect_input(input_arg, args.project_dir)
        config = effective_config(input_params, config_kwargs)
        render(input_params, output_dir, args.stage, config)


def wrap_show_config(args: Any) -> None:
    config_kwargs = parse_config_kwargs(args.config_args)
    if args.inputs:
        input_params = autodetect_input(args.inputs[0], args.project_dir)
        config = effective_config(input_params, config_kwargs)
    else:
        config = FolioConfig.from_kwargs(config_kwargs)

    if config_kwargs:
        print(f"The following config arguments are passed in:\n")
        for key, value in config_kwargs.items():
            print("\t", key, ":\t", value)
    else:
        print(f"No config arguments have been passed in.")
    print("-" * 20)
    for key, value in dataclasses.asdict(config).items():
        print(f"{key} = {value!r}")


def add_input_args(subcommand: argparse.ArgumentParser, nargs: str) -> None:
    subcommand.add_argument(
        "inputs",
        type=str,
        nargs=nargs,
        help="The input documents. If `--project-dir` is not set, each is used to separately infer the 'project' directory where includes and bibliographies live.",
    )
    subcommand.add_argument(
        "--project-dir",
        type=str,
        default=None,
        help="The 'project' directory, where all accessible input files are stored.",
    )
    subcommand.add_argument(
        "--config-args",
        nargs="*",
        type=str,
        help="Colon-separated config values, e.g. 'image_prefix:/img/'. Can be overridden by '{# folio-cli config-arg=key:value #}' lines at the top of an input file.",
    )


def run_cli() -> None:
    parser = argparse.ArgumentParser("folio.cli")

    subparsers = parser.add_subparsers(required=True)

    for stage, help_text in zip(
        STAGES,
        (
            "Expand the tags of each document, then resolve its references and sidebar.",
            "Only expand the tags of each document, leaving references as placeholders.",
            "Only resolve references and the sidebar of already-expanded documents.",
        ),
    ):
        subcommand = subparsers.add_parser(stage, help=help_text)
        add_input_args(subcommand, "+")
        subcommand.add_argument(
            "-o",
            "--output-dir",
            type=str,
            required=True,
            help="The toplevel folder for outputs. Each output keeps its input's project-relative path.",
        )
        subcommand.set_defaults(func=wrap_render, stage=stage)

    show_config_subcommand = subparsers.add_parser(
        "show-config",
        help="Print the configuration a document would be built with.",
    )
    add_input_args(show_config_subcommand, "*")
    show_config_subcommand.set_defaults(func=wrap_show_config)

    args = parser.parse_args()
    # call args.func() with the args
    args.func(args)


if __name__ == "__main__":
    run_cli()
