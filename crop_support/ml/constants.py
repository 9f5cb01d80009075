# ML Constants and Lookup Tables
"""
Disease table and regional prevalence used by the detector
"""

DISEASE_DATABASE = {
    'tomato_late_blight': {
        'name': 'Tomato Late Blight',
        'description': 'A serious fungal disease that affects tomato plants, causing dark lesions on leaves and stems',
        'treatment': 'Apply copper-based fungicide (Copper oxychloride 50% WP @ 3g/liter). '
                     'Remove affected parts and improve air circulation. Avoid overhead watering.',
        'severity': 'High',
        'preventive_measures': [
            'Plant resistant varieties',
            'Ensure proper spacing for air circulation',
            'Avoid overhead irrigation',
            'Remove plant debris',
            'Apply preventive fungicide sprays',
        ],
        'affected_crops': ['Tomato', 'Potato', 'Eggplant'],
        'symptoms': ['Dark water-soaked lesions', 'White fuzzy growth on leaf undersides', 'Brown spots on fruits'],
        'image_features': ['dark_spots', 'water_soaked_lesions', 'leaf_browning'],
    },
    'wheat_rust': {
        'name': 'Wheat Rust',
        'description': 'Fungal disease causing orange-red pustules on wheat leaves and stems',
        'treatment': 'Spray Propiconazole 25% EC @ 1ml/liter or Tebuconazole 10% + Sulphur 65% WG @ 2g/liter. '
                     'Apply at early infection stage.',
        'severity': 'Medium',
        'preventive_measures': [
            'Use resistant wheat varieties',
            'Proper crop rotation',
            'Timely sowing',
            'Balanced fertilization',
            'Monitor weather conditions',
        ],
        'affected_crops': ['Wheat', 'Barley', 'Oats'],
        'symptoms': ['Orange-red pustules', 'Yellow streaks', 'Premature leaf drying'],
        'image_features': ['orange_pustules', 'rust_spots', 'leaf_yellowing'],
    },
    'rice_blast': {
        'name': 'Rice Blast',
        'description': 'Fungal disease causing diamond-shaped lesions on rice leaves',
        'treatment': 'Apply Tricyclazole 75% WP @ 0.6g/liter or Carbendazim 50% WP @ 1g/liter. '
                     'Ensure proper drainage.',
        'severity': 'High',
        'preventive_measures': [
            'Use certified disease-free seeds',
            'Maintain proper water management',
            'Avoid excessive nitrogen fertilization',
            'Plant resistant varieties',
            'Remove infected plant debris',
        ],
        'affected_crops': ['Rice'],
        'symptoms': ['Diamond-shaped lesions', 'Gray centers with brown borders', 'Neck rot in severe cases'],
        'image_features': ['diamond_lesions', 'gray_spots', 'brown_borders'],
    },
    'potato_early_blight': {
        'name': 'Potato Early Blight',
        'description': 'Fungal disease causing concentric ring spots on potato leaves',
        'treatment': 'Apply Mancozeb 75% WP @ 2g/liter or Chlorothalonil 75% WP @ 2g/liter. '
                     'Remove affected foliage.',
        'severity': 'Medium',
        'preventive_measures': [
            'Crop rotation with non-solanaceous crops',
            'Proper plant spacing',
            'Avoid overhead irrigation',
            'Remove volunteer plants',
            'Use certified seed potatoes',
        ],
        'affected_crops': ['Potato', 'Tomato'],
        'symptoms': ['Concentric ring spots', 'Target-like lesions', 'Yellowing of lower leaves'],
        'image_features': ['concentric_rings', 'target_spots', 'yellowing_leaves'],
    },
    'healthy_plant': {
        'name': 'Healthy Plant',
        'description': 'Plant appears healthy with no visible signs of disease',
        'treatment': 'Continue regular monitoring and maintain good agricultural practices. No treatment required.',
        'severity': 'None',
        'preventive_measures': [
            'Regular monitoring',
            'Proper nutrition',
            'Adequate watering',
            'Good sanitation practices',
            'Preventive care',
        ],
        'affected_crops': ['All crops'],
        'symptoms': ['Green healthy foliage', 'Normal growth pattern', 'No visible lesions'],
        'image_features': ['healthy_green', 'normal_texture', 'no_spots'],
    },
}

HEALTHY_KEY = 'healthy_plant'

FEATURE_POOL = [
    feature
    for disease in DISEASE_DATABASE.values()
    for feature in disease['image_features']
]

# Large uploads read as detailed images
HIGH_RESOLUTION_BYTES = 500000
HIGH_RESOLUTION_FEATURES = ['high_resolution', 'detailed_texture']

# Diseases common in a region get a confidence bump there
LOCATION_FACTORS = {
    'punjab': ['wheat_rust', 'rice_blast'],
    'haryana': ['wheat_rust', 'tomato_late_blight'],
    'uttar pradesh': ['potato_early_blight', 'wheat_rust'],
    'maharashtra': ['tomato_late_blight', 'potato_early_blight'],
}

BASELINE_CONFIDENCE = 0.5
CONFIDENCE_CAP = 0.95
NOISE_CEILING = 0.2
UNRELATED_CROP_FACTOR = 0.6
REGIONAL_THRESHOLD = 0.8
REGIONAL_BUMP = 0.1
