"""Ayurvedic food reference catalog."""

from __future__ import annotations


def filter_foods(foods: list[dict], query: str | None) -> list[dict]:
    """
    Filter foods by case-insensitive substring on name or category.

    Args:
        foods: Food dictionaries (as returned by database.list_foods)
        query: Search text; blank returns every food

    Returns:
        Matching foods, original order preserved
    """
    q = (query or "").strip().lower()
    if not q:
        return list(foods)
    return [
        f for f in foods
        if q in (f.get('name') or '').lower() or q in (f.get('category') or '').lower()
    ]


def get_sample_foods():
    """
    Seed catalog used to fill an empty foods table.

    Returns:
        List of food dictionaries
    """
    samples = [
        {
            'name': 'Basmati Rice',
            'category': 'Grains',
            'calories': 130, 'protein_g': 2.7, 'carbs_g': 28.2, 'fat_g': 0.3,
            'rasa': ['Sweet'], 'guna': ['Light', 'Soft'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Vata', 'Balances Pitta'],
            'serving_size': '1 cup cooked',
            'ayurvedic_notes': 'Easy to digest; a good base for kitchari.',
        },
        {
            'name': 'Mung Dal',
            'category': 'Legumes',
            'calories': 105, 'protein_g': 7.0, 'carbs_g': 19.0, 'fat_g': 0.4,
            'rasa': ['Sweet', 'Astringent'], 'guna': ['Light', 'Dry'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Tridoshic'],
            'serving_size': '1/2 cup cooked',
            'ayurvedic_notes': 'The most digestible legume; suits all constitutions.',
        },
        {
            'name': 'Ghee',
            'category': 'Dairy',
            'calories': 112, 'protein_g': 0.0, 'carbs_g': 0.0, 'fat_g': 12.7,
            'rasa': ['Sweet'], 'guna': ['Heavy', 'Oily', 'Soft'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Vata', 'Balances Pitta', 'Increases Kapha'],
            'serving_size': '1 tbsp',
            'ayurvedic_notes': 'Kindles agni; use sparingly for Kapha.',
        },
        {
            'name': 'Fresh Ginger',
            'category': 'Spices',
            'calories': 5, 'protein_g': 0.1, 'carbs_g': 1.1, 'fat_g': 0.0,
            'rasa': ['Pungent', 'Sweet'], 'guna': ['Heavy', 'Oily'],
            'virya': 'Heating', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Vata', 'Balances Kapha', 'Increases Pitta'],
            'serving_size': '1 tsp grated',
            'ayurvedic_notes': 'Universal digestive; take before meals with a pinch of salt.',
        },
        {
            'name': 'Turmeric',
            'category': 'Spices',
            'calories': 9, 'protein_g': 0.3, 'carbs_g': 2.0, 'fat_g': 0.1,
            'rasa': ['Bitter', 'Pungent', 'Astringent'], 'guna': ['Light', 'Dry'],
            'virya': 'Heating', 'vipaka': 'Pungent',
            'dosha_effects': ['Tridoshic'],
            'serving_size': '1 tsp',
            'ayurvedic_notes': 'Anti-inflammatory; pair with black pepper and fat.',
        },
        {
            'name': 'Cucumber',
            'category': 'Vegetables',
            'calories': 16, 'protein_g': 0.7, 'carbs_g': 3.6, 'fat_g': 0.1,
            'rasa': ['Sweet', 'Astringent'], 'guna': ['Light', 'Watery'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Pitta', 'Increases Kapha'],
            'serving_size': '1 cup sliced',
            'ayurvedic_notes': 'Cooling in summer; avoid late in the evening.',
        },
        {
            'name': 'Sweet Potato',
            'category': 'Vegetables',
            'calories': 86, 'protein_g': 1.6, 'carbs_g': 20.1, 'fat_g': 0.1,
            'rasa': ['Sweet'], 'guna': ['Heavy', 'Moist'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Vata', 'Balances Pitta', 'Increases Kapha'],
            'serving_size': '1 medium',
            'ayurvedic_notes': 'Grounding; bake with cumin for better digestion.',
        },
        {
            'name': 'Buttermilk (Takra)',
            'category': 'Dairy',
            'calories': 40, 'protein_g': 3.3, 'carbs_g': 4.8, 'fat_g': 0.9,
            'rasa': ['Sour', 'Astringent'], 'guna': ['Light'],
            'virya': 'Heating', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Vata', 'Balances Kapha'],
            'serving_size': '1 cup',
            'ayurvedic_notes': 'Digestive after lunch; spice with roasted cumin.',
        },
        {
            'name': 'Barley',
            'category': 'Grains',
            'calories': 123, 'protein_g': 2.3, 'carbs_g': 28.2, 'fat_g': 0.4,
            'rasa': ['Sweet', 'Astringent'], 'guna': ['Light', 'Dry'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Pitta', 'Balances Kapha', 'Increases Vata'],
            'serving_size': '1 cup cooked',
            'ayurvedic_notes': 'Good for weight and blood sugar management.',
        },
        {
            'name': 'Dates',
            'category': 'Fruits',
            'calories': 66, 'protein_g': 0.4, 'carbs_g': 18.0, 'fat_g': 0.0,
            'rasa': ['Sweet'], 'guna': ['Heavy', 'Oily'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Balances Vata', 'Balances Pitta', 'Increases Kapha'],
            'serving_size': '1 date',
            'ayurvedic_notes': 'Nourishing (ojas-building); soak before eating.',
        },
        {
            'name': 'Pomegranate',
            'category': 'Fruits',
            'calories': 83, 'protein_g': 1.7, 'carbs_g': 18.7, 'fat_g': 1.2,
            'rasa': ['Sweet', 'Sour', 'Astringent'], 'guna': ['Light', 'Oily'],
            'virya': 'Cooling', 'vipaka': 'Sweet',
            'dosha_effects': ['Tridoshic'],
            'serving_size': '1/2 cup arils',
            'ayurvedic_notes': 'Supports blood and digestion.',
        },
        {
            'name': 'Cumin Seeds',
            'category': 'Spices',
            'calories': 8, 'protein_g': 0.4, 'carbs_g': 0.9, 'fat_g': 0.5,
            'rasa': ['Pungent', 'Bitter'], 'guna': ['Light', 'Dry'],
            'virya': 'Cooling', 'vipaka': 'Pungent',
            'dosha_effects': ['Tridoshic'],
            'serving_size': '1 tsp',
            'ayurvedic_notes': 'Relieves gas and bloating; temper in ghee.',
        },
    ]

    return samples
