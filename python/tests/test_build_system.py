import pytest
from jinja2 import Environment, TemplateNotFound

from folio.build_system import (
    BuildSystemLoader,
    InMemoryBuildSystem,
    SimpleBuildSystem,
)


def test_in_memory_inputs():
    build_sys = InMemoryBuildSystem({"a/b.html": "héllo".encode("utf-8")})
    assert build_sys.read_text("a/b.html") == "héllo"
    assert build_sys.resolve_input_file("a/b.html").external_path is None
    with pytest.raises(ValueError):
        build_sys.resolve_input_file("missing.html")


def test_in_memory_jobs():
    build_sys = InMemoryBuildSystem({"in.txt": b"some input"})

    def job(inputs, output):
        with inputs["src"].open_read_text() as f:
            text = f.read()
        with output.open_write_text() as f:
            f.write(text.upper())

    build_sys.register_file_generator(job, {"src": "in.txt"}, "out.txt")
    with pytest.raises(ValueError):
        build_sys.register_file_generator(job, {"src": "in.txt"}, "out.txt")
    build_sys.run_jobs()
    assert build_sys.get_outputs() == {"out.txt": b"SOME INPUT"}


def test_simple_build_system_stays_inside_its_directories(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    (project / "doc.html").write_text("x", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("y", encoding="utf-8")
    build_sys = SimpleBuildSystem(project, tmp_path / "out")

    assert build_sys.read_text("doc.html") == "x"
    with pytest.raises(ValueError):
        build_sys.resolve_input_file("../secret.txt")
    with pytest.raises(ValueError):
        build_sys.resolve_input_file("missing.html")
    with pytest.raises(ValueError):
        build_sys.resolve_output_file("../escaped.html")

    with pytest.raises(ValueError):
        SimpleBuildSystem(tmp_path / "nonexistent", tmp_path / "out")


def test_loader():
    env = Environment(
        loader=BuildSystemLoader(InMemoryBuildSystem({"doc.html": b"{{ x }}!"}))
    )
    assert env.get_template("doc.html").render(x="hi") == "hi!"
    with pytest.raises(TemplateNotFound):
        env.get_template("missing.html")
