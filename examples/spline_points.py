import dxfscene
from dxfscene.bspline import sample


def main() -> None:
    control_points = [(0, 0), (5, 10), (10, 10), (15, 0)]
    print("t=0.5:", dxfscene.evaluate(0.5, 2, control_points))
    print("weighted t=0.5:", dxfscene.evaluate(0.5, 2, control_points, None, [1, 4, 4, 1]))

    for x, y in sample(2, control_points, segments=4):
        print(f"{dxfscene.round10(x, -3):g}, {dxfscene.round10(y, -3):g}")


if __name__ == "__main__":
    main()
