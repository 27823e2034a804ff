from django.contrib import admin

from .models import Donation


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ("id", "project", "formatted_amount", "payment_gateway", "created_at")
    list_filter = ("payment_gateway", "created_at")
    search_fields = ("id", "project__title", "payment_gateway")
    readonly_fields = ("id", "project", "amount", "payment_gateway", "created_at")
    ordering = ("-created_at",)

    def formatted_amount(self, obj):
        return obj.formatted_amount
    formatted_amount.short_description = "Amount"

    def has_add_permission(self, request):
        # Donations enter through the workflow so the project total follows.
        return False

    def has_change_permission(self, request, obj=None):
        return False
