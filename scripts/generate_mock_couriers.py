import csv
import random

def generate_mock_couriers(filename="mock_couriers_100.csv", count=100):
    # Base coordinate roughly mapping to the center of Harare.
    # Orders are typically clustered around -17.82, 31.05
    base_lat = -17.824858
    base_lon = 31.053028

    with open(filename, mode='w', newline='') as file:
        writer = csv.writer(file)
        writer.writerow(["courier_id", "name", "lat", "lon", "status"])

        for i in range(count):
            courier_id = f"CUR-{str(i+1).zfill(3)}"

            # Scatter couriers randomly around the city center (roughly +/- 8km)
            lat = base_lat + (random.random() - 0.5) * 0.15
            lon = base_lon + (random.random() - 0.5) * 0.15

            # 75% active, the rest split between busy and offline
            roll = random.random()
            if roll < 0.75:
                status = "active"
            elif roll < 0.9:
                status = "busy"
            else:
                status = "offline"

            writer.writerow([courier_id, f"Courier {i+1}", round(lat, 6), round(lon, 6), status])

    print(f"Successfully generated {count} mock couriers into '{filename}'.")

if __name__ == "__main__":
    generate_mock_couriers()
