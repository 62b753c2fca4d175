"""
Fields
-------

Defines some additional fields so that the Schemas can
serialize to and from additional native python data types.
"""

from typing import Union, Dict, Any

from marshmallow import fields, ValidationError
from shapely.geometry import Point, mapping


class PointField(fields.Field):
    """
    A field that serializes a :class:`~shapely.geometry.Point` to a
    GeoJSON point geometry and de-serializes it back.
    """

    def _serialize(self, value: Union[Point, Dict], attr, obj, **kwargs) -> Dict[str, Any]:
        """Converts a point (or an already mapped point) to a GeoJSON geometry."""
        if value is None:
            return None
        if isinstance(value, Point):
            value = mapping(value)
        if not isinstance(value, dict) or value.get("type") != "Point":
            raise ValidationError(f"Only accepts points, not {value}.")

        return {"type": "Point", "coordinates": list(value["coordinates"])}

    def _deserialize(self, value: Dict[str, Any], attr, data, **kwargs) -> Point:
        """Converts a GeoJSON point geometry to a point."""
        if not isinstance(value, dict) or value.get("type") != "Point":
            raise ValidationError("Location must be a GeoJSON point.")

        coordinates = value.get("coordinates")
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
            raise ValidationError("A point must have exactly two coordinates (longitude, latitude).")

        try:
            longitude, latitude = (float(c) for c in coordinates)
        except (TypeError, ValueError):
            raise ValidationError("Coordinates must be numbers.")

        if not -180 <= longitude <= 180:
            raise ValidationError(f"Longitude {longitude} is out of range.")
        if not -90 <= latitude <= 90:
            raise ValidationError(f"Latitude {latitude} is out of range.")

        return Point(longitude, latitude)

    @staticmethod
    def _jsonschema_type_mapping():
        """Defines the jsonschema type for the object."""
        return {
            'type': 'object',
            'properties': {
                'type': {'type': 'string', 'enum': ['Point']},
                'coordinates': {'type': 'array', 'items': {'type': 'number'}, 'minItems': 2, 'maxItems': 2},
            }
        }


def Money(**kwargs):
    """A two decimal place amount, sent as a string so no precision is lost."""
    return fields.Decimal(places=2, as_string=True, **kwargs)


def Many(schema):
    return fields.List(fields.Nested(schema))
