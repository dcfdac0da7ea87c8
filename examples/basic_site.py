from pathlib import Path

from roxy import InputBuildSettings


# Optional, and can be overridden with command line options:
#   roxy --config examples/basic_site.py --output build/
SETTINGS = InputBuildSettings(
    input_dir=Path(__file__).parent / 'basic_site' / 'content',
    layouts_dir=Path(__file__).parent / 'basic_site' / 'layouts',
    output_dir=Path('output/basic_site'),
    theme='friendly',
)
