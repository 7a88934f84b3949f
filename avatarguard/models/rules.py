"""Read-only rule tables shared by every validator."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


# Drawing, container, paint-server, clipping and filter-primitive elements.
# Anything interactive, scriptable, animating or resource-fetching stays out.
ALLOWED_ELEMENTS: frozenset = frozenset({
    "svg",
    "g",
    "defs",
    "symbol",
    "use",
    "switch",
    "title",
    "desc",
    "style",
    "path",
    "rect",
    "circle",
    "ellipse",
    "line",
    "polyline",
    "polygon",
    "text",
    "tspan",
    "textPath",
    "image",
    "linearGradient",
    "radialGradient",
    "stop",
    "pattern",
    "clipPath",
    "mask",
    "marker",
    "filter",
    "feBlend",
    "feColorMatrix",
    "feComponentTransfer",
    "feComposite",
    "feConvolveMatrix",
    "feDiffuseLighting",
    "feDisplacementMap",
    "feDistantLight",
    "feDropShadow",
    "feFlood",
    "feFuncA",
    "feFuncB",
    "feFuncG",
    "feFuncR",
    "feGaussianBlur",
    "feMerge",
    "feMergeNode",
    "feMorphology",
    "feOffset",
    "fePointLight",
    "feSpecularLighting",
    "feSpotLight",
    "feTile",
    "feTurbulence",
})

# Never allowed, whatever the allow-list says. Kept for clearer messages.
DANGEROUS_ELEMENTS: frozenset = frozenset({
    "script",
    "foreignObject",
    "a",
    "animate",
    "animateMotion",
    "animateTransform",
    "animateColor",
    "set",
    "iframe",
    "object",
    "embed",
    "feImage",
    "handler",
    "listener",
})


class AttributePolicy(str, Enum):
    """How the value of an attribute is checked."""

    PLAIN = "plain"
    URL = "url"
    REFERENCE = "reference"
    CSS = "css"
    COLOR = "color"
    PAINT = "paint"
    ID = "id"
    CLASS = "class"


_PLAIN_ATTRIBUTES = (
    # geometry
    "d", "x", "y", "x1", "x2", "y1", "y2", "cx", "cy", "r", "rx", "ry",
    "fx", "fy", "fr", "width", "height", "points", "pathLength",
    "viewBox", "preserveAspectRatio", "transform", "transform-origin",
    # paint and stroke
    "opacity", "fill-opacity", "fill-rule", "stroke-width",
    "stroke-linecap", "stroke-linejoin", "stroke-miterlimit",
    "stroke-dasharray", "stroke-dashoffset", "stroke-opacity",
    "stop-opacity", "flood-opacity", "clip-rule", "mask-type",
    "paint-order", "vector-effect", "shape-rendering", "color-interpolation",
    "color-interpolation-filters", "mix-blend-mode", "isolation",
    "visibility", "display", "overflow",
    # text
    "font-family", "font-size", "font-weight", "font-style",
    "font-variant", "font-stretch", "letter-spacing", "word-spacing",
    "text-anchor", "dominant-baseline", "alignment-baseline",
    "baseline-shift", "text-decoration", "text-rendering", "writing-mode",
    "direction", "unicode-bidi", "dx", "dy", "rotate", "textLength",
    "lengthAdjust", "startOffset", "method", "spacing", "side",
    # paint servers, markers, clipping
    "offset", "gradientUnits", "gradientTransform", "spreadMethod",
    "patternUnits", "patternContentUnits", "patternTransform",
    "markerUnits", "markerWidth", "markerHeight", "refX", "refY",
    "orient", "clipPathUnits", "maskUnits", "maskContentUnits",
    # filters
    "filterUnits", "primitiveUnits", "in", "in2", "result", "mode",
    "operator", "k1", "k2", "k3", "k4", "type", "values",
    "tableValues", "slope", "intercept", "amplitude", "exponent",
    "stdDeviation", "edgeMode", "kernelMatrix", "kernelUnitLength",
    "order", "divisor", "bias", "targetX", "targetY", "preserveAlpha",
    "surfaceScale", "diffuseConstant", "specularConstant",
    "specularExponent", "azimuth", "elevation", "z", "pointsAtX",
    "pointsAtY", "pointsAtZ", "limitingConeAngle", "scale",
    "xChannelSelector", "yChannelSelector", "radius", "baseFrequency",
    "numOctaves", "seed", "stitchTiles",
)

_POLICY_TABLE = {name: AttributePolicy.PLAIN for name in _PLAIN_ATTRIBUTES}
_POLICY_TABLE.update({
    "href": AttributePolicy.URL,
    "filter": AttributePolicy.REFERENCE,
    "mask": AttributePolicy.REFERENCE,
    "clip-path": AttributePolicy.REFERENCE,
    "marker-start": AttributePolicy.REFERENCE,
    "marker-mid": AttributePolicy.REFERENCE,
    "marker-end": AttributePolicy.REFERENCE,
    "style": AttributePolicy.CSS,
    "fill": AttributePolicy.PAINT,
    "stroke": AttributePolicy.PAINT,
    "stop-color": AttributePolicy.COLOR,
    "flood-color": AttributePolicy.COLOR,
    "lighting-color": AttributePolicy.COLOR,
    "color": AttributePolicy.COLOR,
    "id": AttributePolicy.ID,
    "class": AttributePolicy.CLASS,
})

ATTRIBUTE_POLICIES: Mapping[str, AttributePolicy] = MappingProxyType(_POLICY_TABLE)

# Lower-cased prefixes; matched case-insensitively against attribute keys.
NAMESPACE_PREFIXES: Tuple[str, ...] = ("xlink:", "xmlns", "xml:")

RESERVED_KEYS: frozenset = frozenset({"__proto__", "constructor", "prototype"})

TEXT_VARIABLES: frozenset = frozenset({"initial", "initials", "fontFamily", "fontWeight"})

FLIP_VALUES: frozenset = frozenset({"none", "horizontal", "vertical", "both"})
