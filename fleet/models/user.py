"""
User
---------------------------
"""
from tortoise import Model, fields
from tortoise.validators import MinValueValidator, MaxValueValidator

from fleet.models.util import UserRole


class User(Model):
    """
    Represents a rider (or administrator) in the system.

    The ``tier`` is the rider's declared socioeconomic bracket (1-6)
    and drives the discount applied to their rentals.
    """

    id = fields.IntField(primary_key=True)
    external_id = fields.CharField(max_length=64, unique=True)
    """The subject the authentication layer knows this user by."""

    first_name = fields.CharField(max_length=100)
    last_name = fields.CharField(max_length=100)
    email = fields.CharField(max_length=150, unique=True)

    tier = fields.SmallIntField(null=True, validators=[MinValueValidator(1), MaxValueValidator(6)])
    role = fields.CharEnumField(UserRole, max_length=16, default=UserRole.USER)
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    def serialize(self):
        return {
            "id": self.id,
            "external_id": self.external_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "tier": self.tier,
        }

    def __str__(self):
        return f"[{self.id}] {self.first_name} {self.last_name} ({self.email})"
