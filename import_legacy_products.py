import argparse
import json
import logging
import os

from dotenv import load_dotenv
from tqdm import tqdm

# --- Setup Logging ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

LEGACY_TEXT_FIELDS = [
    "Name", "SKU", "Categories", "Tags", "Images", "Description", "Short description", "Download 1 URL",
]


def _price(value):
    try:
        return float(str(value).replace(",", "").strip())
    except (TypeError, ValueError):
        return None


def legacy_product(row):
    """
    Maps one row of a WooCommerce product export onto a products document.
    The legacy columns are kept as they are; ``price`` / ``salePrice`` /
    ``status`` / ``seo`` are filled so the row shows up in catalog listings.
    """
    from catalog.models import ProductStatus
    from catalog.services import build_seo

    doc = {field: row[field] for field in LEGACY_TEXT_FIELDS if row.get(field) not in (None, "")}
    regular = _price(row.get("Regular price"))
    sale = _price(row.get("Sale price"))
    doc.update({
        "Regular price": regular,
        "price": regular or 0,
        "salePrice": sale or 0,
        "isSale": bool(sale) and bool(regular) and sale < regular,
        "status": ProductStatus.PUBLISHED.value if str(row.get("Published", "1")) == "1" else ProductStatus.DRAFT.value,
        "seo": build_seo({}, row.get("Name") or row.get("SKU"), row.get("Short description") or row.get("Description")),
    })
    return doc


def import_legacy_products(json_file_path):
    """
    Reads a WooCommerce JSON export and upserts every row into the
    'products' collection, keyed on SKU.
    """
    logging.info("Starting legacy product import...")

    load_dotenv()
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'houseplans_backend.settings')

    from houseplans_backend.documents import utcnow
    from houseplans_backend.mongo_config import collection

    try:
        logging.info(f"Reading data from '{json_file_path}'...")
        with open(json_file_path, 'r', encoding='utf-8') as f:
            rows = json.load(f)
    except FileNotFoundError:
        logging.error(f"Error: The file '{json_file_path}' was not found.")
        return 0
    except json.JSONDecodeError:
        logging.error(f"Error: Could not decode JSON from the file '{json_file_path}'.")
        return 0

    if not rows:
        logging.warning(f"No products found in '{json_file_path}'. Exiting.")
        return 0

    logging.info(f"Found {len(rows)} products to import.")
    products = collection("products")
    imported = 0
    for row in tqdm(rows, desc="Importing products"):
        sku = row.get("SKU")
        if not sku:
            logging.warning(f"Skipping product with missing 'SKU': {row.get('Name')}")
            continue

        now = utcnow()
        products.update_one(
            {"SKU": sku},
            {"$set": {**legacy_product(row), "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
            upsert=True,
        )
        imported += 1

    logging.info(f"Import complete: {imported} products written.")
    return imported


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import a WooCommerce product export into MongoDB.")
    parser.add_argument("json_file", nargs="?", default="legacy_products.json")
    args = parser.parse_args()
    import_legacy_products(args.json_file)
