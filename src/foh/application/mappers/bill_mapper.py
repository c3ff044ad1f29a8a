from __future__ import annotations

from foh.application.dto.responses import BillResponse
from foh.application.mappers.money_mapper import to_money_response
from foh.domain.billing.entities import Bill


def to_bill_response(bill: Bill) -> BillResponse:
    return BillResponse(
        billId=str(bill.bill_id),
        orderId=str(bill.order_id),
        subtotal=to_money_response(bill.subtotal),
        taxPercent=bill.tax_percent,
        taxAmount=to_money_response(bill.tax_amount),
        discountPercent=bill.discount_percent,
        discountAmount=to_money_response(bill.discount_amount),
        finalTotal=to_money_response(bill.final_total),
        paymentStatus=bill.payment_status.value,
        paymentMethod=bill.payment_method,
        createdAt=bill.created_at,
        paidAt=bill.paid_at,
    )
