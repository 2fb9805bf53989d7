import pathlib
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from folio.build_system import (
    FileJobInputs,
    JobOutputFile,
    ProjectRelativePath,
    SimpleBuildSystem,
)
from folio.config import FolioConfig
from folio.expand import Expander
from folio.resolve import Resolver

STAGES = ("render", "expand", "resolve")

# folio input files can override command-line config arguments with comment lines at the start of the file.
# The lines of the file are parsed until they stop being Jinja2 comments, and of those all that fit the
# `{# folio-cli config-arg=key:value #}` pattern are used. They override the command-line arguments.
FOLIO_CLI_LINE = re.compile(r"^\{#\s*folio-cli\s+(.*?)\s*#\}\s*$")
CONFIG_ARG_LINE = re.compile(r"config-arg=([^:]+:.*)")


def parse_config_kwargs(config_args: Optional[List[str]]) -> Dict[str, str]:
    config_kwargs: Dict[str, str] = {}
    if config_args:
        for config_arg in config_args:
            if ":" not in config_arg:
                raise ValueError(
                    f"Config argument '{config_arg}' isn't of the form key:value"
                )
            key, value = config_arg.split(":", maxsplit=1)
            config_kwargs[key] = value
    return config_kwargs


def read_file_config_kwargs(source: str) -> Dict[str, str]:
    """The config overrides from the leading `{# folio-cli config-arg=key:value #}` lines of `source`."""
    config_args = []
    for line in source.splitlines():
        if not line.startswith("{#"):
            break
        match = FOLIO_CLI_LINE.match(line)
        if match:
            arg = CONFIG_ARG_LINE.match(match.group(1))
            if arg is None:
                raise ValueError(f"Unrecognised folio-cli line '{line}'")
            config_args.append(arg.group(1))
    return parse_config_kwargs(config_args)


@dataclass
class InputParams:
    project_dir: pathlib.Path
    input_rel_path: ProjectRelativePath


def autodetect_input(input_arg: str, project_folder_arg: Optional[str]) -> InputParams:
    """Split the input argument into a project directory and a project-relative document path.

    With --project-dir, an existing file is made relative to it and anything else is taken as already relative.
    Without it, the first component of a relative path is the project directory
    (./site/_posts/post.html gives ./site/ and _posts/post.html, so sibling folders of includes stay reachable),
    a single-component path uses the working directory, and absolute paths are rejected.
    """
    if project_folder_arg:
        project_dir = pathlib.Path(project_folder_arg)
        input_path = pathlib.Path(input_arg)
        if input_path.is_file():
            print(
                f"Making sure input path {input_path} is inside the supplied project directory {project_dir}"
            )
            return InputParams(
                project_dir,
                input_path.resolve().relative_to(project_dir.resolve()).as_posix(),
            )
        else:
            print(f"Assuming input path {input_arg} is relative to {project_dir}")
            return InputParams(project_dir, input_arg)
    else:
        overall_input_path = pathlib.Path(input_arg)
        if overall_input_path.is_absolute():
            raise ValueError(
                f"Cannot infer project directory from absolute path '{input_arg}', please supply --project-dir argument"
            )
        if not overall_input_path.is_file():
            raise ValueError(f"Supplied input file '{input_arg}' isn't a file")

        if len(overall_input_path.parts) > 1:
            project_dir = pathlib.Path(overall_input_path.parts[0])
            print(f"Taking project directory from the input path: '{project_dir}'")
            return InputParams(
                project_dir, pathlib.PurePosixPath(*overall_input_path.parts[1:]).as_posix()
            )
        else:
            print("Taking project directory as the working directory")
            return InputParams(
                project_dir=pathlib.Path("."),
                input_rel_path=overall_input_path.as_posix(),
            )


def autodetect_output(output_arg: str) -> pathlib.Path:
    output_dir = pathlib.Path(output_arg)
    if output_dir.exists() and not output_dir.is_dir():
        raise ValueError(
            f"Output directory {output_dir} exists but isn't a directory. Please make it a folder."
        )
    elif not output_dir.exists():
        print(f"Output directory {output_dir} does not exist, auto creating...")
        output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def effective_config(
    input: InputParams, cli_kwargs: Dict[str, str]
) -> FolioConfig:
    """The command-line config arguments, overridden by the input file's own folio-cli lines."""
    with open(input.project_dir / input.input_rel_path, "r", encoding="utf-8") as f:
        source = f.read()
    file_kwargs = read_file_config_kwargs(source)
    for key, value in file_kwargs.items():
        print(f"Taking config '{key}' from input file: '{value}'")
    return FolioConfig.from_kwargs({**cli_kwargs, **file_kwargs})


def render(
    input: InputParams,
    output_dir: pathlib.Path,
    stage: str,
    config: FolioConfig,
) -> None:
    if stage not in STAGES:
        raise ValueError(f"Unknown stage '{stage}', expected one of {STAGES}")

    if (output_dir / input.input_rel_path).resolve() == (
        input.project_dir / input.input_rel_path
    ).resolve():
        raise ValueError(
            f"Output for {input.input_rel_path} would overwrite the input, choose a different --output-dir"
        )

    build_sys = SimpleBuildSystem(input.project_dir, output_dir)

    def job(in_files: FileJobInputs, out_file: JobOutputFile) -> None:
        if stage == "resolve":
            with in_files["document"].open_read_text() as f:
                html = f.read()
        else:
            html = Expander(config, build_sys).expand_file(input.input_rel_path).html
        if stage != "expand":
            html = Resolver(config).resolve(html).html
        with out_file.open_write_text() as f:
            f.write(html)

    build_sys.register_file_generator(
        job, inputs={"document": input.input_rel_path}, output_path=input.input_rel_path
    )
    build_sys.run_jobs()
    print(f"Wrote {output_dir / input.input_rel_path}")
