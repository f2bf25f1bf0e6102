"""
Menu routes
Read the menu and edit categories, items and availability
"""

from fastapi import APIRouter, Depends

from ...core.error_handler import create_success_response
from ...core.security import require_session
from ...models.menu import Menu, MenuCategory, MenuItem
from ...schemas.menu import CategoryUpdateRequest
from ...services.menu_service import MenuService
from ..deps import get_menu_service

router = APIRouter(dependencies=[Depends(require_session)])


def _menu_response(menu: Menu, message: str = "OK"):
    return create_success_response(data=menu.model_dump(mode="json"), message=message)


@router.get("")
def get_menu(service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.get_menu())


@router.put("")
def replace_menu(menu: Menu, service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.save_menu(menu), "Menu saved")


@router.post("/categories")
def add_category(category: MenuCategory, service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.add_category(category), "Category added")


@router.put("/categories/{category_id}")
def update_category(category_id: str, req: CategoryUpdateRequest,
                    service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.update_category(category_id, req.name, req.icon), "Category updated")


@router.delete("/categories/{category_id}")
def delete_category(category_id: str, service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.delete_category(category_id), "Category deleted")


@router.post("/categories/{category_id}/items")
def add_item(category_id: str, item: MenuItem, service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.add_item(category_id, item), "Item added")


@router.put("/categories/{category_id}/items/{item_id}")
def update_item(category_id: str, item_id: str, item: MenuItem,
                service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.update_item(category_id, item_id, item), "Item updated")


@router.delete("/categories/{category_id}/items/{item_id}")
def delete_item(category_id: str, item_id: str, service: MenuService = Depends(get_menu_service)):
    return _menu_response(service.delete_item(category_id, item_id), "Item deleted")


@router.post("/categories/{category_id}/items/{item_id}/toggle")
def toggle_item(category_id: str, item_id: str, service: MenuService = Depends(get_menu_service)):
    """Flip an item's availability"""
    item = service.toggle_availability(category_id, item_id)
    state = "available" if item.available else "unavailable"
    return create_success_response(data=item.model_dump(mode="json"), message=f"{item.name} is now {state}")
