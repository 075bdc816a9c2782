import argparse
from pathlib import Path
import sys
# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from handwrite_rows.ocr_engine import OCREngine, TextResult
from handwrite_rows.row_parser import DelimiterPolicy, parse_policy, parse_text_to_rows

def run_manual_test():
    """
    A simple script to manually run the OCR engine on a test image
    and see the recognized text and the parsed rows.
    """
    parser = argparse.ArgumentParser(description="Run manual OCR test.")
    parser.add_argument(
        "--image-path",
        type=str,
        required=True,
        help="Path to the input image.",
    )
    parser.add_argument(
        "--delimiter",
        type=str,
        default=DelimiterPolicy.AUTO.value,
        choices=[p.value for p in DelimiterPolicy],
        help="Delimiter policy used to split lines into cells.",
    )
    parser.add_argument(
        "--pattern",
        type=str,
        default="",
        help="Regular expression for the custom delimiter policy.",
    )
    parser.add_argument(
        "--lang",
        type=str,
        default="en",
        help="PaddleOCR language.",
    )
    args = parser.parse_args()

    # 1. Define the input image path
    image_path = Path(args.image_path)
    if not image_path.exists():
        print(f"Error: Test image not found at '{image_path}'")
        return

    print(f"Input image: {image_path}\n")

    # 2. Initialize the OCR Engine
    print("Initializing the OCR engine (this may take a moment)...")
    engine = OCREngine(lang=args.lang)
    try:
        init_time = engine.initialize()
        print(f"Engine initialized in {init_time:.2f} seconds.\n")
    except Exception as e:
        print(f"Error initializing engine: {e}")
        return

    # 3. Run recognition, printing progress as it arrives
    print("Running recognition on the image...")
    text = ""
    try:
        for event in engine.iter_recognize(str(image_path)):
            if isinstance(event, TextResult):
                text = event.text
            else:
                print(f"  {event.phase}: {event.progress:.0%}")
        print("Recognition complete.\n")
    except Exception as e:
        print(f"Error during recognition: {e}")
        return

    # 4. Print the text and the parsed rows
    print("=" * 25)
    print("   Recognized Text")
    print("=" * 25)
    print(text)
    print()
    print("=" * 25)
    print("   Parsed Rows")
    print("=" * 25)
    for row in parse_text_to_rows(text, parse_policy(args.delimiter), args.pattern):
        print(" | ".join(row))

if __name__ == "__main__":
    run_manual_test()
