# main.py
import sys
import argparse
import logging

from gltfdata import GltfError, LoaderConfig, ModelParser
from gltfdata.buffer_views import iter_entities
from gltfdata.type_catalog import string_for


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Inspect the buffers and accessors of a glTF asset")
    parser.add_argument("path", help="glTF or binary glTF file, or URI")
    parser.add_argument("--accessors", action="store_true",
                        help="dump the data of every accessor")
    parser.add_argument("--elements-per-row", type=int, default=8,
                        help="elements per row in accessor dumps")
    parser.add_argument("--format", default="{}",
                        help="str.format pattern for accessor values, e.g. '{:.3f}'")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument("--log-file", default="gltf_inspect.log",
                        help="file that receives the log")
    return parser.parse_args(argv)


def print_summary(gltf_data, args):
    print(f"Asset: {gltf_data.uri}")

    print(f"\nBuffers ({len(gltf_data.buffers)}):")
    for buffer_id, buffer in gltf_data.buffers.items():
        print(f"  {buffer_id}: {buffer.size} bytes")

    print(f"\nBuffer views ({len(gltf_data.buffer_views)}):")
    for buffer_view_id, buffer_view in gltf_data.buffer_views.items():
        print(f"  {buffer_view_id}: buffer {buffer_view.buffer_id}, "
              f"offset {buffer_view.byte_offset}, length {buffer_view.byte_length}")
    for buffer_view_id, error in gltf_data.buffer_view_errors:
        print(f"  {buffer_view_id}: SKIPPED ({error})")

    print("\nAccessors:")
    for accessor_id, accessor in iter_entities(gltf_data.gltf.get('accessors')):
        try:
            view = gltf_data.get_accessor_view(accessor_id)
        except GltfError as e:
            print(f"  {accessor_id}: INVALID ({e})")
            continue
        print(f"  {accessor_id}: {view.count} x {view.element_shape.value} "
              f"{string_for(view.component_type)}, "
              f"min {view.get_min().tolist()}, max {view.get_max().tolist()}")
        if args.accessors:
            print("    " + view.format_string(args.format, args.elements_per_row)
                  .replace("\n", "\n    "))

    if gltf_data.images:
        print("\nImages:")
        for image_id, data in gltf_data.images.items():
            print(f"  {image_id}: {len(data)} bytes, "
                  f"{gltf_data.image_mime_types.get(image_id) or 'unknown type'}")

    if gltf_data.json_errors:
        print("\nJSON errors:")
        for error in gltf_data.json_errors:
            print(f"  {error}")

    box = gltf_data.compute_bounding_box()
    if box.is_empty():
        print("\nBounding box: no positions found")
    else:
        print(f"\nBounding box: min {box.min.tolist()}, max {box.max.tolist()}, "
              f"center {box.center.tolist()}, size {box.size.tolist()}")


def main(argv=None):
    args = parse_args(argv)

    # Setup logging
    logging.basicConfig(
        filename=args.log_file,
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
    )

    try:
        parser = ModelParser(config=LoaderConfig(debug=args.debug))
        gltf_data = parser.parse_file(args.path)
    except (GltfError, OSError) as e:
        logging.critical(f"Could not load {args.path}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(gltf_data, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
