import argparse
import logging

import image_io
import renderer
import scene_parser


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Render a JSON scene with the tiled ray tracer")
    p.add_argument("scene", help="path to the scene description (.json)")
    p.add_argument("-o", "--outfile", default="out.png", help="output image, .ppm or any format Pillow writes")
    p.add_argument("--workers", type=int, help="number of render processes")
    p.add_argument("--tile-size", type=int, dest="tile_size")
    p.add_argument("--max-depth", type=int, dest="max_depth", help="reflection recursion limit")
    p.add_argument("--supersample", action="store_true", default=None, help="4 samples per pixel")
    p.add_argument("--specular", choices=["phong", "cook_torrance"], dest="specular_model")
    p.add_argument("--quiet", action="store_true", help="no progress bar, warnings only")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    overrides = {
        "workers": args.workers,
        "tile_size": args.tile_size,
        "max_depth": args.max_depth,
        "supersample": args.supersample,
        "specular_model": args.specular_model,
        "progress": not args.quiet,
    }
    camera, scene, config = scene_parser.load_scene(args.scene, overrides)
    pixels = renderer.render(camera, scene, config)
    image_io.save_image(args.outfile, pixels)
    logging.getLogger(__name__).info("Wrote %s", args.outfile)


if __name__ == "__main__":
    main()
