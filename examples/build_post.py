import argparse
from pathlib import Path

from folio import Expander, FolioConfig, Resolver
from folio.build_system import InMemoryBuildSystem, SimpleBuildSystem
from folio.cli import read_file_config_kwargs

if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("-o", type=str, default=None, help="Write the page here instead of printing it")
    parser.add_argument("--expanded", action="store_true", help="Stop after the expand stage")
    args = parser.parse_args()

    project_dir = Path(__file__).parent / "site"
    real_build_sys = SimpleBuildSystem(project_dir=project_dir, output_dir=project_dir / "output")
    config = FolioConfig.from_kwargs(
        read_file_config_kwargs(real_build_sys.read_text("post.html"))
    )

    expanded = Expander(config, real_build_sys).expand_file("post.html")
    for anchor in expanded.anchors:
        print(f"anchor {anchor}")
    html = expanded.html
    if not args.expanded:
        resolved = Resolver(config).resolve(html)
        for item in resolved.nav_items:
            print(f"{'  ' * item.level}- {item.text} (#{item.anchor_id})")
        html = resolved.html

    if args.o:
        Path(args.o).write_text(html, encoding="utf-8")
    else:
        # Same job through an in-memory build system, to show nothing touches the disk
        mem_build_sys = InMemoryBuildSystem({"post.html": html.encode("utf-8")})
        print(mem_build_sys.read_text("post.html"))
