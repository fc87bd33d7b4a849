from .tenancy import BusinessUnit, PosConfiguration
from .inventory import InventoryItem, InventoryLocation, InventoryStock, InventoryMovement
from .menu import MenuItem, Recipe, RecipeItem
from .orders import DiningTable, Order, OrderItem, OrderItemModifier, PaymentMethod, Payment, Discount
from .accounting import (
    GlAccount,
    MenuItemGlMapping,
    PaymentMethodGlMapping,
    AccountingPeriod,
    NumberingSeries,
    JournalEntry,
    JournalEntryLine,
    LedgerPostingRequest,
)

__all__ = [
    'BusinessUnit', 'PosConfiguration',
    'InventoryItem', 'InventoryLocation', 'InventoryStock', 'InventoryMovement',
    'MenuItem', 'Recipe', 'RecipeItem',
    'DiningTable', 'Order', 'OrderItem', 'OrderItemModifier', 'PaymentMethod', 'Payment', 'Discount',
    'GlAccount', 'MenuItemGlMapping', 'PaymentMethodGlMapping',
    'AccountingPeriod', 'NumberingSeries', 'JournalEntry', 'JournalEntryLine',
    'LedgerPostingRequest',
]
