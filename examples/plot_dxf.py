import sys

import dxfscene


def main() -> None:
    path = sys.argv[1] if len(sys.argv) > 1 else "examples/data/sample.dxf"
    doc = dxfscene.read(path)

    scene = dxfscene.assemble(doc)
    print(f"entities: {scene.total_entities} (skipped {scene.skipped_entities})")
    for kind, count in scene.counts_by_kind().items():
        print(f"{kind}: {count}")

    ax = doc.plot(show=False, title=path)
    ax.figure.savefig("plot_dxf.png", dpi=150)
    print("saved: plot_dxf.png")


if __name__ == "__main__":
    main()
