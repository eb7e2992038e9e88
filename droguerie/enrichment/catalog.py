"""
Product image catalog.

Exact product names mapped to hosted images, plus the hardware and
electronics overrides applied after the generic pass.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

FALLBACK_IMAGE_URL = (
    "https://images.thdstatic.com/productImages/aa0c3885-66ce-4aa4-a0cf-132ee52af1c7/"
    "svn/clorox-all-purpose-cleaners-c-23259492-2-64_600.jpg"
)

PRODUCT_IMAGES: Dict[str, str] = {
    # Cleaning Products
    "Ariel Detergent Powder 3kg": (
        "https://images.thdstatic.com/productImages/b38fac1d-a7b1-445e-ae13-77c85d77e468/"
        "svn/clorox-all-purpose-cleaners-4460031122-64_600.jpg"
    ),
    "Ajax Floor Cleaner 1L": (
        "https://images.thdstatic.com/productImages/cb8bdf75-12ea-4f09-b8e0-7b06fc910c0f/"
        "svn/bona-hardwood-floor-cleaners-wm700051223-64_600.jpg"
    ),
    "Javex Bleach 2L": (
        "https://mobileimages.lowes.com/productimages/40cef318-4718-479c-94df-e9128fc988d6/"
        "68454920.jpeg?size=pdhism"
    ),
    "Glass Cleaner Spray 500ml": (
        "https://images.albertsons-media.com/is/image/ABS/960015143-C1N1"
        "?$ng-ecom-pdp-desktop$&defaultImage=Not_Available"
    ),
    # Personal Care
    "Dove Beauty Bar 90g": (
        "https://bfasset.costco-static.com/U447IH35/as/6tf7897j4b64rzj83bwsgz3v/4000160751-847__1"
        "?auto=webp&format=jpg&width=600&height=600&fit=bounds&canvas=600,600"
    ),
    "Head & Shoulders Shampoo 400ml": (
        "https://content.oppictures.com/Master_Images/Master_Variants/Variant_1500/15069789.jpg"
    ),
    "Colgate Total Toothpaste 100ml": (
        "https://images.thdstatic.com/productImages/6acd7009-1e5b-47c6-b87e-46924fd12dfb/"
        "svn/clorox-all-purpose-cleaners-c-100142325-3-64_600.jpg"
    ),
    "Oral-B Toothbrush Medium": (
        "https://images.thdstatic.com/productImages/0bb93d67-5934-4120-bb49-508d6e38d626/"
        "svn/granite-gold-countertop-cleaners-gg0069-64_600.jpg"
    ),
}


@dataclass(frozen=True)
class CategoryOverrides:
    """Images for named products of one category"""
    category: str
    images: Tuple[Tuple[str, str], ...]


CATEGORY_OVERRIDES: Tuple[CategoryOverrides, ...] = (
    CategoryOverrides(
        category="Hardware & Tools",
        images=(
            (
                "Multi-purpose Screwdriver Set",
                "https://images.unsplash.com/photo-1581244277943-fe4a9c777189?w=600&h=600&fit=crop",
            ),
            (
                "LED Flashlight",
                "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=600&h=600&fit=crop",
            ),
        ),
    ),
    CategoryOverrides(
        category="Electronics & Batteries",
        images=(
            (
                "AA Batteries Pack (8 pieces)",
                "https://images.unsplash.com/photo-1583394838336-acd977736f90?w=600&h=600&fit=crop",
            ),
            (
                "Extension Cord 3m",
                "https://images.unsplash.com/photo-1621905251189-08b45d6a269e?w=600&h=600&fit=crop",
            ),
        ),
    ),
)
