from rest_framework import serializers
from .models import Courier, Order, DispatchLog, SearchAttempt, AssignmentAttempt


class CourierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Courier
        fields = ['id', 'name', 'phone_number', 'status', 'current_lat', 'current_lng', 'location_updated_at']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ['id', 'status', 'courier', 'delivery_address', 'delivery_lat', 'delivery_lng', 'created_at', 'updated_at']
        read_only_fields = fields


class DispatchConfigSerializer(serializers.Serializer):
    """
    Input shape for PUT /dispatch/config. Every field is optional (upsert-merge);
    the store re-validates the merged config as a whole.
    """
    searchRadius = serializers.IntegerField(min_value=1, required=False)
    incrementalRadius = serializers.IntegerField(min_value=1, required=False)
    maxIncrements = serializers.IntegerField(min_value=1, required=False)
    maxRadius = serializers.IntegerField(min_value=1, required=False)
    orderAssignmentTimeout = serializers.IntegerField(min_value=1, required=False)
    offerTimeout = serializers.IntegerField(min_value=1, required=False)
    maxOrdersPerDeliveryMan = serializers.IntegerField(min_value=1, required=False)
    locatorRetries = serializers.IntegerField(min_value=0, required=False)
    enforceZoneCoverage = serializers.BooleanField(required=False)
    markOrderFailedOnExhaustion = serializers.BooleanField(required=False)

    def validate(self, attrs):
        unknown = set(self.initial_data) - set(self.fields)
        if unknown:
            raise serializers.ValidationError({key: "Unknown config field." for key in sorted(unknown)})
        return attrs


class BoundaryField(serializers.Field):
    """
    [{"latitude": .., "longitude": ..}, ...] on the wire,
    tuple of (lat, lon) in the domain.
    """
    default_error_messages = {
        'invalid': 'Expected a list of {"latitude", "longitude"} points.',
        'too_short': 'A zone boundary needs at least 3 points.',
    }

    def to_representation(self, value):
        return [{"latitude": lat, "longitude": lon} for lat, lon in value]

    def to_internal_value(self, data):
        if not isinstance(data, list):
            self.fail('invalid')
        points = []
        for point in data:
            try:
                if isinstance(point, dict):
                    points.append((float(point["latitude"]), float(point["longitude"])))
                else:
                    lat, lon = point
                    points.append((float(lat), float(lon)))
            except (KeyError, TypeError, ValueError):
                self.fail('invalid')
        if len(points) < 3:
            self.fail('too_short')
        return points


class DispatchZoneSerializer(serializers.Serializer):
    """
    Reads/writes zones.DispatchZone records (not ORM rows): creation and
    updates go through the zone registry so duplicate names are refused there.
    """
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(max_length=255)
    coordinates = BoundaryField(source='boundary')
    deliveryFee = serializers.DecimalField(source='delivery_fee', max_digits=10, decimal_places=2, min_value=0)
    minimumDeliveryTime = serializers.IntegerField(source='minimum_delivery_time', min_value=0)
    maximumDeliveryTime = serializers.IntegerField(source='maximum_delivery_time', min_value=0, required=False, allow_null=True)
    status = serializers.BooleanField(source='is_active', default=True)


class AssignOrderSerializer(serializers.Serializer):
    orderId = serializers.CharField()
    courierId = serializers.CharField()


class AutoAssignSerializer(serializers.Serializer):
    orderId = serializers.CharField()


class DispatchLogFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DispatchLog.Status.choices, required=False)
    startDate = serializers.DateTimeField(required=False)
    endDate = serializers.DateTimeField(required=False)


class SearchAttemptSerializer(serializers.ModelSerializer):
    deliveryMenFound = serializers.IntegerField(source='couriers_found')

    class Meta:
        model = SearchAttempt
        fields = ['radius', 'deliveryMenFound', 'failed', 'timestamp']


class AssignmentAttemptSerializer(serializers.ModelSerializer):
    courier = CourierSerializer(read_only=True)

    class Meta:
        model = AssignmentAttempt
        fields = ['courier', 'status', 'timestamp']


class DispatchLogSerializer(serializers.ModelSerializer):
    """
    Audit view of a log with its order, assigned courier and every
    attempt's courier resolved.
    """
    order = OrderSerializer(read_only=True)
    courier = CourierSerializer(read_only=True)
    searchAttempts = SearchAttemptSerializer(source='search_attempts', many=True, read_only=True)
    assignmentAttempts = AssignmentAttemptSerializer(source='assignment_attempts', many=True, read_only=True)
    failureReason = serializers.CharField(source='failure_reason', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = DispatchLog
        fields = ['id', 'order', 'courier', 'zone', 'status', 'failureReason', 'searchAttempts', 'assignmentAttempts', 'createdAt']
