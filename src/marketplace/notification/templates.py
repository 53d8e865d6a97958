"""Buyer email templates for order lifecycle messages."""


class PurchaseReceiptTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        total = context.get("total_price", 0.0)
        name = context.get("name") or "there"
        return {
            "subject": f"Order Confirmation - #{order_id}",
            "body": (
                f"Hi {name},\n\n"
                f"We received your payment of ${total:.2f} for order #{order_id}.\n\n"
                "This is your purchase receipt. We will let you know when it is delivered.\n\n"
                "Thank you for your purchase!"
            ),
        }


class DeliveryNoticeTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        name = context.get("name") or "there"
        return {
            "subject": f"Your order #{order_id} has been delivered",
            "body": (
                f"Hi {name},\n\n"
                f"Order #{order_id} was delivered. We hope you enjoy your purchase.\n\n"
                "Let other shoppers know what you think by leaving a review."
            ),
        }
