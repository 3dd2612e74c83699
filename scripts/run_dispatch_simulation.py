"""
End-to-end run of the assignment engine against in-memory stores.

Loads couriers from a CSV (see generate_mock_couriers.py) or scatters them
randomly, places orders around Harare, auto-assigns each one and writes the
outcome per order to dispatch_results.csv.

Usage (from the repo root):
    python -m scripts.run_dispatch_simulation
"""
import csv
import logging
import os
import random
import time
from typing import List

from couriers.directory import InMemoryCourierDirectory
from couriers.locator import GeoCourierLocator
from couriers.models import Courier
from dispatch.config import DispatchConfig, InMemoryDispatchConfigStore
from dispatch.engine import AssignmentEngine
from dispatch.log import InMemoryDispatchLogStore
from dispatch.offers import OfferState, ScriptedOfferChannel
from orders.models import Order
from orders.store import InMemoryOrderStore
from zones.registry import InMemoryZoneRegistry

CENTER_LAT = -17.824858
CENTER_LON = 31.053028

# Rough box around central Harare, used as the only service zone
HARARE_ZONE = [(-17.90, 30.97), (-17.90, 31.14), (-17.75, 31.14), (-17.75, 30.97)]


def load_couriers(filepath="mock_couriers_100.csv") -> List[Courier]:
    couriers = []

    # Resolve the correct path depending on where the user runs the script from.
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    absolute_path = os.path.join(base_dir, filepath)
    if not os.path.exists(absolute_path):
        return []

    with open(absolute_path, 'r') as file:
        reader = csv.DictReader(file)
        for row in reader:
            couriers.append(
                Courier.new(
                    row['courier_id'],
                    float(row['lat']),
                    float(row['lon']),
                    row['status'],
                    name=row.get('name', ""),
                )
            )
    return couriers


def scatter_couriers(count=60) -> List[Courier]:
    couriers = []
    for i in range(count):
        lat = CENTER_LAT + (random.random() - 0.5) * 0.12
        lon = CENTER_LON + (random.random() - 0.5) * 0.12
        status = "active" if random.random() < 0.8 else "offline"
        couriers.append(Courier.new(f"CUR-{str(i+1).zfill(3)}", lat, lon, status, name=f"Courier {i+1}"))
    return couriers


def scatter_orders(count=40) -> List[Order]:
    orders = []
    for i in range(count):
        # Dropoffs within ~6km of the center, a few outside the zone on purpose
        lat = CENTER_LAT + random.uniform(-0.06, 0.06)
        lon = CENTER_LON + random.uniform(-0.06, 0.06)
        orders.append(Order.new(f"o_{str(i+1).zfill(6)}", lat, lon))
    return orders


def run_simulation(decline_rate=0.2):
    print("=== STARTING AUTO-ASSIGNMENT SIMULATION ===")
    logging.basicConfig(level=logging.WARNING)

    # 1. Load Data
    couriers = load_couriers() or scatter_couriers()
    orders = scatter_orders()
    print(f"Loaded {len(orders)} Orders and {len(couriers)} Couriers.\n")

    # 2. Configure System
    directory = InMemoryCourierDirectory()
    for courier in couriers:
        directory.add(courier)

    order_store = InMemoryOrderStore()
    for order in orders:
        order_store.add(order)

    zones = InMemoryZoneRegistry()
    zones.create("Harare Central", HARARE_ZONE, delivery_fee="2.50", minimum_delivery_time=20, maximum_delivery_time=45)

    # Some couriers ignore or refuse offers
    replies = {}
    for courier in couriers:
        if random.random() < decline_rate:
            replies[courier.id] = random.choice([OfferState.DECLINED, OfferState.TIMED_OUT])
    offers = ScriptedOfferChannel(replies)

    engine = AssignmentEngine(
        orders=order_store,
        couriers=directory,
        locator=GeoCourierLocator(directory),
        logs=InMemoryDispatchLogStore(),
        config_store=InMemoryDispatchConfigStore(DispatchConfig(max_orders_per_delivery_man=2)),
        zones=zones,
        offers=offers,
    )

    # 3. Auto-assign every order
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    output_path = os.path.join(base_dir, "dispatch_results.csv")

    assigned = 0
    start_time = time.time()
    with open(output_path, "w", newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["order_id", "courier_id", "status", "radii_tried", "offers_made", "zone", "delivery_fee"])

        for order in orders:
            result = engine.auto_assign(order.id)
            log = result.dispatch_log
            zone_name = result.zone.name if result.zone else "-"

            writer.writerow([
                order.id,
                result.courier.id if result.courier else "FAILED",
                log.status.value,
                "/".join(str(radius) for radius in log.radii_tried),
                len(log.assignment_attempts),
                zone_name,
                result.delivery_fee if result.delivery_fee is not None else "N/A",
            ])

            if result.success:
                assigned += 1
                print(f"[SUCCESS] Order {order.id} -> {result.courier.id} at {log.radii_tried[-1]}m ({zone_name})")
            else:
                print(f"[FAILED] Order {order.id} -> {result.error} after radii {log.radii_tried}")

    print("\n=== SIMULATION COMPLETE ===")
    print(f"Orders Assigned: {assigned} / {len(orders)} in {time.time() - start_time:.2f}s")
    print(f"Offers Made: {len(offers.offers_made)}")
    print(f"Results written to '{output_path}'.")

if __name__ == "__main__":
    run_simulation()
