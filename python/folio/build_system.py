"""Where documents, their includes and their bibliographies are read from, and where finished pages are written.

Inputs are named by project-relative paths and outputs by output-relative paths, never by absolute paths.
A JobInputFile can be opened for reading and a JobOutputFile for writing wherever they actually live,
so the CLI works on real directories while tests run entirely in memory.

`BuildSystemLoader` exposes the input side to Jinja2, so `{% include %}` inside a document reads through the same files.
"""

import abc
import io
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, ContextManager, Dict, Iterator, Optional, Tuple

from jinja2 import BaseLoader, Environment, TemplateNotFound

ProjectRelativePath = str
OutputRelativePath = str


class JobInputFile(abc.ABC):
    path: ProjectRelativePath
    external_path: Optional[Path]
    """Where the file lives on disk, or None if it only exists in memory."""

    def __init__(self, path: ProjectRelativePath, external_path: Optional[Path]) -> None:
        self.path = path
        self.external_path = external_path

    @abc.abstractmethod
    def open_read_text(self, encoding: str = "utf-8") -> ContextManager[io.TextIOBase]: ...


class JobOutputFile(abc.ABC):
    path: OutputRelativePath
    external_path: Optional[Path]

    def __init__(self, path: OutputRelativePath, external_path: Optional[Path]) -> None:
        self.path = path
        self.external_path = external_path

    @abc.abstractmethod
    def open_write_text(self, encoding: str = "utf-8") -> ContextManager[io.TextIOBase]: ...


FileJobInputs = Dict[str, JobInputFile]
FileJob = Callable[[FileJobInputs, JobOutputFile], None]


class BuildSystem(abc.ABC):
    """Resolves input and output files, and runs the jobs that turn inputs into pages."""

    file_jobs: Dict[OutputRelativePath, Tuple[Dict[str, ProjectRelativePath], FileJob]]

    def __init__(self) -> None:
        self.file_jobs = {}

    @abc.abstractmethod
    def resolve_input_file(self, path: ProjectRelativePath) -> JobInputFile:
        """Raises ValueError if the file doesn't exist or is outside the project."""
        ...

    @abc.abstractmethod
    def resolve_output_file(self, path: OutputRelativePath) -> JobOutputFile: ...

    def read_text(self, path: ProjectRelativePath, encoding: str = "utf-8") -> str:
        with self.resolve_input_file(path).open_read_text(encoding) as f:
            return f.read()

    def register_file_generator(
        self,
        job: FileJob,
        inputs: Dict[str, ProjectRelativePath],
        output_path: OutputRelativePath,
    ) -> None:
        """Register `job` to write `output_path` from the named `inputs` when run_jobs() is called."""
        if output_path in self.file_jobs:
            raise ValueError(f"More than one job writes '{output_path}'")
        self.file_jobs[output_path] = (inputs, job)

    def run_jobs(self) -> None:
        for output_path, (inputs, job) in self.file_jobs.items():
            job(
                {name: self.resolve_input_file(p) for name, p in inputs.items()},
                self.resolve_output_file(output_path),
            )


class DiskInputFile(JobInputFile):
    external_path: Path

    def open_read_text(self, encoding: str = "utf-8") -> ContextManager[io.TextIOBase]:
        return open(self.external_path, "r", encoding=encoding)


class DiskOutputFile(JobOutputFile):
    external_path: Path

    def open_write_text(self, encoding: str = "utf-8") -> ContextManager[io.TextIOBase]:
        return open(self.external_path, "w", encoding=encoding)


def _contained_path(root: Path, rel_path: str, what: str) -> Path:
    p = (root / rel_path).resolve()
    if not p.is_relative_to(root):
        raise ValueError(f"{what} '{rel_path}' is outside {root}")
    return p


class SimpleBuildSystem(BuildSystem):
    """Reads from a project directory and writes into an output directory, creating it if needed."""

    project_dir: Path
    output_dir: Path

    def __init__(
        self, project_dir: Path, output_dir: Path, make_output_dir: bool = True
    ) -> None:
        super().__init__()
        self.project_dir = project_dir.resolve()
        if not self.project_dir.is_dir():
            raise ValueError(f"Project dir '{self.project_dir}' isn't a directory")
        self.output_dir = output_dir.resolve()
        if not self.output_dir.is_dir():
            if not make_output_dir:
                raise ValueError(f"Output dir '{self.output_dir}' isn't a directory")
            self.output_dir.mkdir(parents=True, exist_ok=True)

    def resolve_input_file(self, path: ProjectRelativePath) -> JobInputFile:
        p = _contained_path(self.project_dir, path, "Input")
        if not p.is_file():
            raise ValueError(f"Input '{path}' doesn't exist in {self.project_dir}")
        return DiskInputFile(path, p)

    def resolve_output_file(self, path: OutputRelativePath) -> JobOutputFile:
        p = _contained_path(self.output_dir, path, "Output")
        p.parent.mkdir(parents=True, exist_ok=True)
        return DiskOutputFile(path, p)


class MemoryInputFile(JobInputFile):
    data: bytes

    def __init__(self, path: ProjectRelativePath, data: bytes) -> None:
        super().__init__(path, None)
        self.data = data

    def open_read_text(self, encoding: str = "utf-8") -> ContextManager[io.TextIOBase]:
        return io.StringIO(self.data.decode(encoding))


class MemoryOutputFile(JobOutputFile):
    buffer: io.BytesIO

    def __init__(self, path: OutputRelativePath) -> None:
        super().__init__(path, None)
        self.buffer = io.BytesIO()

    @contextmanager
    def _text_writer(self, encoding: str) -> Iterator[io.TextIOBase]:
        wrapper = io.TextIOWrapper(self.buffer, encoding=encoding)
        try:
            yield wrapper
        finally:
            # detach() flushes without closing the buffer
            wrapper.detach()

    def open_write_text(self, encoding: str = "utf-8") -> ContextManager[io.TextIOBase]:
        return self._text_writer(encoding)


class InMemoryBuildSystem(BuildSystem):
    """Reads inputs from a dict of bytes and collects outputs in memory. Used by tests and the examples."""

    input_files: Dict[ProjectRelativePath, bytes]
    output_files: Dict[OutputRelativePath, MemoryOutputFile]

    def __init__(self, input_files: Dict[ProjectRelativePath, bytes]) -> None:
        super().__init__()
        self.input_files = input_files
        self.output_files = {}

    def resolve_input_file(self, path: ProjectRelativePath) -> JobInputFile:
        if path not in self.input_files:
            raise ValueError(f"Input '{path}' doesn't exist")
        return MemoryInputFile(path, self.input_files[path])

    def resolve_output_file(self, path: OutputRelativePath) -> JobOutputFile:
        if path not in self.output_files:
            self.output_files[path] = MemoryOutputFile(path)
        return self.output_files[path]

    def get_outputs(self) -> Dict[OutputRelativePath, bytes]:
        return {path: f.buffer.getvalue() for path, f in self.output_files.items()}


class BuildSystemLoader(BaseLoader):
    """Jinja2 loader reading templates (i.e. documents and their includes) through a BuildSystem."""

    build_sys: BuildSystem
    encoding: str

    def __init__(self, build_sys: BuildSystem, encoding: str = "utf-8") -> None:
        self.build_sys = build_sys
        self.encoding = encoding

    def get_source(
        self, environment: Environment, template: str
    ) -> Tuple[str, Optional[str], Optional[Callable[[], bool]]]:
        try:
            input_file = self.build_sys.resolve_input_file(template)
        except ValueError:
            raise TemplateNotFound(template)
        with input_file.open_read_text(self.encoding) as f:
            source = f.read()
        external_path = input_file.external_path
        filename = str(external_path) if external_path is not None else template
        # Documents are small and always re-read, never served from Jinja's cache
        return source, filename, lambda: False
