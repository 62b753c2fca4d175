"""
Sites
-----
"""
from typing import Optional, Union, List

from tortoise.backends.base.client import BaseDBAsyncClient

from fleet.models import Site
from fleet.models.util import resolve_id
from fleet.service.access import scoped


async def create_site(name: str, city: str, region: str, *, address: str = None) -> Site:
    return await Site.create(name=name, city=city, region=region, address=address)


async def get_site(site: Union[Site, int], *, using_db: BaseDBAsyncClient = None) -> Optional[Site]:
    return await scoped(Site.filter(id=resolve_id(site)), using_db).first()


async def get_sites(*, city: str = None, region: str = None) -> List[Site]:
    """
    Gets all the sites in the system.

    :param city: An optional city to filter by.
    :param region: An optional region to filter by.
    """
    query = Site.all()

    if city is not None:
        query = query.filter(city__iexact=city)
    if region is not None:
        query = query.filter(region__iexact=region)

    return await query.order_by("name")
