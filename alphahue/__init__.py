"""AlphaHue client package.

A Python library for controlling lighting bridges over their REST API.

Includes:
- Hex and RGB to CIE xy color conversion (sRGB or legacy gamma curve)
- Light, group, sensor, rule and schedule endpoints
- Bridge pairing and API version checks
- Write throttling so the bridge does not drop updates
"""

__version__ = "0.1.0"
