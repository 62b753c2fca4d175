"""
Site
---------------------------

The depot (or regional office) that owns bicycles and hosts events.
"""
from typing import Dict, Any

from tortoise import Model, fields


class Site(Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=150)
    city = fields.CharField(max_length=100)
    region = fields.CharField(max_length=100)
    address = fields.CharField(max_length=255, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "region": self.region,
            "address": self.address,
        }

    def __str__(self):
        return f"[{self.id}] {self.name} ({self.city})"
