from django.contrib import admin

from .models import AssignmentAttempt, Courier, DispatchConfig, DispatchLog, DispatchZone, Order, SearchAttempt


@admin.register(Courier)
class CourierAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'status', 'current_lat', 'current_lng', 'location_updated_at')
    list_filter = ('status',)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'status', 'courier', 'created_at')
    list_filter = ('status',)


@admin.register(DispatchZone)
class DispatchZoneAdmin(admin.ModelAdmin):
    list_display = ('name', 'delivery_fee', 'minimum_delivery_time', 'maximum_delivery_time', 'status')


admin.site.register(DispatchConfig)


class SearchAttemptInline(admin.TabularInline):
    model = SearchAttempt
    extra = 0
    readonly_fields = ('radius', 'couriers_found', 'failed', 'timestamp')


class AssignmentAttemptInline(admin.TabularInline):
    model = AssignmentAttempt
    extra = 0
    readonly_fields = ('courier', 'status', 'timestamp')


# Logs are an audit trail: viewable, never edited or deleted here
@admin.register(DispatchLog)
class DispatchLogAdmin(admin.ModelAdmin):
    list_display = ('order', 'status', 'courier', 'failure_reason', 'created_at')
    list_filter = ('status',)
    inlines = [SearchAttemptInline, AssignmentAttemptInline]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
