import logging
import os

from dotenv import load_dotenv


def collect_names(products):
    """Unique brand and category names across seller products, first spelling wins."""
    brands, categories = {}, {}
    for product in products:
        for field, names in (("brand", brands), ("category", categories)):
            value = product.get(field)
            if value and isinstance(value, str) and value.strip():
                names.setdefault(value.strip().lower(), value.strip())
    return sorted(brands.values()), sorted(categories.values())


def populate_categories():
    """
    Scans the 'sellerproducts' collection and records every brand and
    category it uses in the 'brands' / 'categories' lookup collections.
    """
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.info("Starting brand and category population script...")

    load_dotenv()
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'houseplans_backend.settings')

    from houseplans_backend.mongo_config import collection
    from sellers.models import BRANDS, CATEGORIES, SELLER_PRODUCTS
    from sellers.services import find_or_create

    products = list(collection(SELLER_PRODUCTS).find({}, {"brand": 1, "category": 1}))
    if not products:
        logging.warning("'sellerproducts' collection is empty. Nothing to populate.")
        return

    brands, categories = collect_names(products)
    logging.info(f"Found {len(brands)} brands and {len(categories)} categories in {len(products)} products.")

    added = 0
    for collection_name, names in ((BRANDS, brands), (CATEGORIES, categories)):
        for name in names:
            if find_or_create(collection_name, name):
                added += 1
                logging.info(f"  - Added '{name}' to {collection_name}")

    logging.info(f"Done. {added} new entries written.")


if __name__ == '__main__':
    populate_categories()
