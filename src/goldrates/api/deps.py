from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from goldrates.container import Container
from goldrates.infra.price.service import MetalPriceService


@inject
def get_price_service(
    service: MetalPriceService = Depends(Provide[Container.price_service]),
) -> MetalPriceService:
    return service
