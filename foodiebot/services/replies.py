# foodiebot/services/replies.py
"""WhatsApp reply texts. WhatsApp renders *bold* and _italic_."""
from typing import Iterable, List, Optional

from foodiebot.services.geo_pricing import DeliveryQuote, GeoPoint
from foodiebot.services.menu import MenuItemView
from foodiebot.services.order_parser import IntakeResult
from foodiebot.services.orders import OrderStatus

ORDER_EXAMPLE = '"Burger x2, Pizza x1"'


def money(amount: float, currency: str) -> str:
    return f"{currency}{amount:.2f}"


def welcome_text(shop_name: str, sender_name: Optional[str] = None) -> str:
    greeting = f"Hello {sender_name} from {shop_name}! 😊" if sender_name else f"Hello from {shop_name}! 😊"
    return (
        f"{greeting}\n\nHow can I help you today? You can try:\n\n"
        "*1. Order Food* 🍔\n*2. View Menu* 📜\n*3. My Orders* 📦\n"
        "*4. Shop Location* 📍\n*5. Contact Us* 📞\n\n"
        'Type *"profile"* to see your details or *"payments"* for payment options.'
    )


def menu_text(shop_name: str, items: Iterable[MenuItemView], currency: str, for_ordering: bool = False) -> str:
    items = list(items)
    if not items:
        return "Sorry, our menu is currently empty. Please check back later!"
    lines = [f"*{shop_name} Menu:*\n"]
    for index, item in enumerate(items, start=1):
        lines.append(f"{index}. *{item.name}* - {money(item.price, currency)}")
        if item.description:
            lines.append(f"   _{item.description}_")
        if item.is_trending:
            lines.append("   _🔥 Trending_")
        if item.is_new:
            lines.append("   _✨ New_")
        lines.append("")
    if for_ordering:
        lines.append(
            f"To order, please send the *item name(s) and quantity*, e.g., {ORDER_EXAMPLE}.\n\n"
            "Or reply with *Cancel Order* to abort."
        )
    else:
        lines.append(f"You can order by sending the *item name(s) and quantity*, e.g., {ORDER_EXAMPLE}.")
    return "\n".join(lines)


# --- Profile ---
def ask_name_text(sender_name: Optional[str] = None) -> str:
    hello = f"Hi {sender_name}! " if sender_name else "Hi! "
    return f"{hello}👋 Before we take your order, please tell us your *name*:"


def ask_address_text() -> str:
    return "👤 Great! Now please provide your *delivery address*:"


def profile_complete_text() -> str:
    return f"✅ Profile completed! Now you can place orders.\n\nSend *menu* to see what we have, then order like {ORDER_EXAMPLE}."


def blank_input_text(what: str) -> str:
    return f"Please type your {what} as a text message."


def profile_text(phone: str, name: Optional[str], address: Optional[str]) -> str:
    return (
        "👤 *Your Profile*\n\n"
        f"📱 Phone: {phone}\n"
        f"👤 Name: {name or 'Not set'}\n"
        f"📍 Address: {address or 'Not set'}\n\n"
        "✏️ To edit:\n"
        '• Type "edit name" to change name\n'
        '• Type "edit address" to change address'
    )


def ask_new_name_text() -> str:
    return "👤 Please enter your new name:"


def ask_new_address_text() -> str:
    return "📍 Please enter your new address:"


def name_updated_text() -> str:
    return "✅ Name updated successfully!"


def address_updated_text() -> str:
    return "✅ Address updated successfully!"


def location_saved_text(has_pending_order: bool) -> str:
    text = "📍 Thanks! We've saved your location for delivery."
    if has_pending_order:
        text += "\n\nSend your order again to get the delivery fee for this location, or reply *Confirm Order* to keep it as is."
    return text


# --- Ordering ---
def order_summary_text(
    result: IntakeResult,
    quote: DeliveryQuote,
    currency: str,
    location_from_message: bool = False,
    location_missing: bool = False,
) -> str:
    lines: List[str] = ["Got it! Here's your order summary:\n"]
    for line in result.resolved:
        lines.append(f"*{line.name}* x{line.quantity} = {money(line.line_total, currency)}")

    if location_from_message:
        lines.append("\n*Delivery Location:* Received from your message.")
    elif location_missing:
        lines.append(
            "\n*Please share your current location for delivery fee calculation and address confirmation.* "
            "You can do this by sending your location via WhatsApp."
        )

    if quote.calculated:
        lines.append(f"*Distance:* {quote.distance_km:.2f} km")
        lines.append(f"*Delivery Fee:* {money(quote.fee, currency)}")
    else:
        lines.append("*Delivery Fee:* Will be calculated upon location confirmation.")

    subtotal = result.subtotal
    lines.append(f"*Subtotal:* {money(subtotal, currency)}")
    lines.append(f"*Total:* {money(subtotal + quote.fee, currency)}\n")

    if result.unresolved:
        lines.append(f"_Note: The following items were not found or are unavailable: {', '.join(result.unresolved)}_\n")

    lines.append("To confirm your order, please reply with *Confirm Order*.")
    return "\n".join(lines)


def items_not_found_text(names: Iterable[str]) -> str:
    return (
        f"Sorry, I couldn't find the following items in our menu: {', '.join(names)}. "
        "Please check the menu and try again!"
    )


def order_not_understood_text() -> str:
    return 'I could not understand your order request. Please send items and quantities, e.g., "Burger x2".'


def order_placed_text(order_id: str, status: str) -> str:
    return (
        f"Thank you for confirming! Your order (ID: {order_id}) has been placed and is "
        f"*{OrderStatus.label(status)}*. We will process it shortly."
    )


def no_pending_order_text() -> str:
    return "No pending order to confirm. Please place an order first!"


def payment_choice_text(order_id: str, total: float, currency: str) -> str:
    return (
        f"💳 How would you like to pay {money(total, currency)} for order {order_id}?\n\n"
        "💰 Reply *COD* for Cash on Delivery\n"
        "🏦 Reply *UPI* to pay online now"
    )


def upi_instructions_text(order_id: str, total: float, currency: str, upi_id: str) -> str:
    return (
        f"🏦 Please pay *{money(total, currency)}* to UPI ID *{upi_id}* for order {order_id}.\n\n"
        "After paying, send a *screenshot* of the payment or the *12-digit UTR number*."
    )


def payment_proof_reprompt_text(order_id: str, upi_id: str) -> str:
    return (
        f"We're waiting for your payment proof for order {order_id}.\n\n"
        f"Pay to UPI ID *{upi_id}*, then send a *screenshot* or the *12-digit UTR number*."
    )


def payment_proof_received_text(order_id: str) -> str:
    return f"🧾 Thanks! We've received your payment details for order {order_id}. We'll verify it and update you shortly."


def proof_order_closed_text(order_id: str) -> str:
    return (
        f"Order {order_id} is no longer open, so no payment proof is needed for it. "
        "Send *menu* to start a new order or *contact us* for help."
    )


def payments_info_text(upi_id: str, contact_phone: Optional[str]) -> str:
    text = (
        "💳 *Payment Options*\n\n"
        "💰 *Cash on Delivery (COD)*\n• Pay when your order arrives\n• No advance payment required\n\n"
        f"🏦 *Online Payment*\n• UPI: {upi_id}"
    )
    if contact_phone:
        text += f"\n\n📞 For payment issues, contact: {contact_phone}"
    return text


def order_cancelled_text(order_id: str) -> str:
    return f"❌ Your order {order_id} has been cancelled. You can place a new one anytime."


def cancel_help_text() -> str:
    return (
        "You have no order waiting for confirmation. If you wish to cancel a placed order, "
        "please contact us with the Order ID so we can assist you."
    )


def recent_orders_text(orders, currency: str) -> str:
    if not orders:
        return "You have no recent orders. Why not place one now?"
    lines = ["*Your Recent Orders:*\n"]
    for order in orders:
        items = ", ".join(f"{item['name']} x{item['quantity']}" for item in order.items or [])
        lines.append(f"*Order ID:* {order.order_id}")
        lines.append(f"*Status:* {OrderStatus.label(order.status)}")
        lines.append(f"*Total:* {money(order.total, currency)}")
        lines.append(f"*Date:* {order.created_at:%d %b %Y %H:%M}")
        lines.append(f"*Items:* {items}\n")
    lines.append("For full details, please contact us.")
    return "\n".join(lines)


def shop_location_text(location: Optional[GeoPoint]) -> str:
    if location is None:
        return "Shop location is not configured yet. Please check back later!"
    link = f"https://www.google.com/maps/search/?api=1&query={location.latitude},{location.longitude}"
    return f"Here's our shop location:\n{link}\n\nWe look forward to seeing you!"


def contact_text(contact_phone: Optional[str]) -> str:
    if contact_phone:
        return f"You can reach us directly on this WhatsApp number or call us at {contact_phone}."
    return "You can reach us directly on this WhatsApp number."


def fallback_text() -> str:
    return "Sorry, I did not understand that. Please use one of the options, type *help*, or try ordering food."


def error_text() -> str:
    return "❌ Sorry, something went wrong. Please try again."


# --- Admin-driven notifications ---
STATUS_TEMPLATES = {
    OrderStatus.CONFIRMED: "✅ Your order {order_id} from *{shop}* has been *confirmed*!",
    OrderStatus.PREPARING: "👨‍🍳 Your order {order_id} from *{shop}* is being *prepared*.",
    OrderStatus.READY: "🛍️ Your order {order_id} from *{shop}* is *ready*.",
    OrderStatus.OUT_FOR_DELIVERY: "🛵 Your order {order_id} from *{shop}* is *out for delivery*!",
    OrderStatus.DELIVERED: "🎉 Your order {order_id} from *{shop}* has been *delivered*. Enjoy your meal!",
    OrderStatus.CANCELLED: "❌ Your order {order_id} from *{shop}* has been *cancelled*.",
}


def status_update_text(order_id: str, status: str, shop_name: str) -> Optional[str]:
    template = STATUS_TEMPLATES.get(status)
    if template is None:
        return None
    return template.format(order_id=order_id, shop=shop_name)


def web_order_receipt_text(order_id: str, total: float, status: str, shop_name: str, currency: str) -> str:
    return (
        f"🎉 Your order (ID: {order_id}) has been placed successfully from *{shop_name}*!\n"
        f"Total: {money(total, currency)}\nStatus: *{OrderStatus.label(status)}*\n"
        "We will confirm and process it shortly."
    )
