"""
Prediction Functions
Simulated disease detection: samples image features and matches them
against the disease table
"""
import random
import time

from crop_support.errors import ValidationError
from crop_support.ml.constants import (
    DISEASE_DATABASE, HEALTHY_KEY, FEATURE_POOL, HIGH_RESOLUTION_BYTES,
    HIGH_RESOLUTION_FEATURES, LOCATION_FACTORS, BASELINE_CONFIDENCE,
    CONFIDENCE_CAP, NOISE_CEILING, UNRELATED_CROP_FACTOR, REGIONAL_THRESHOLD,
    REGIONAL_BUMP,
)


def _disease_result(info, confidence):
    return {
        'disease': info['name'],
        'confidence': confidence,
        'description': info['description'],
        'treatment': info['treatment'],
        'severity': info['severity'],
        'preventiveMeasures': list(info['preventive_measures']),
        'affectedCrops': list(info['affected_crops']),
        'symptoms': list(info['symptoms']),
    }


class DiseaseDetector:
    def __init__(self, max_image_size=5 * 1024 * 1024, processing_delay=1.5, rng=None):
        self.max_image_size = max_image_size
        self.processing_delay = processing_delay
        self.rng = rng or random.Random()

    def extract_features(self, image_bytes):
        """
        Stand-in for model feature extraction.

        Args:
            image_bytes (bytes): Raw upload

        Returns:
            list: 2-4 sampled feature names, plus resolution hints for large images
        """
        if self.processing_delay:
            time.sleep(self.processing_delay)

        features = []
        if len(image_bytes) > HIGH_RESOLUTION_BYTES:
            features.extend(HIGH_RESOLUTION_FEATURES)

        for _ in range(self.rng.randint(2, 4)):
            feature = self.rng.choice(FEATURE_POOL)
            if feature not in features:
                features.append(feature)
        return features

    def match_disease(self, features):
        best_key, best_confidence = HEALTHY_KEY, BASELINE_CONFIDENCE
        for key, info in DISEASE_DATABASE.items():
            matching = [f for f in features if f in info['image_features']]
            confidence = len(matching) / len(info['image_features'])
            if confidence > best_confidence:
                best_key, best_confidence = key, confidence

        best_confidence = min(CONFIDENCE_CAP, best_confidence + self.rng.random() * NOISE_CEILING)
        return best_key, best_confidence

    def detect(self, image_bytes, crop_type=None, location=None):
        """
        Detect a crop disease from an image.

        Args:
            image_bytes (bytes): Image content
            crop_type (str, optional): Crop the image was taken from
            location (str, optional): Free-text location, used for regional prevalence

        Returns:
            dict: disease, confidence (0-1), description, treatment, severity,
            preventiveMeasures, affectedCrops, symptoms
        """
        if len(image_bytes) > self.max_image_size:
            raise ValidationError('Image size exceeds maximum allowed size')

        key, confidence = self.match_disease(self.extract_features(image_bytes))
        info = DISEASE_DATABASE[key]

        if crop_type and key != HEALTHY_KEY:
            wanted = crop_type.lower()
            relevant = any(crop.lower() in wanted or wanted in crop.lower() for crop in info['affected_crops'])
            if not relevant:
                confidence *= UNRELATED_CROP_FACTOR

        if location and confidence > REGIONAL_THRESHOLD:
            place = location.lower()
            for region, common in LOCATION_FACTORS.items():
                if region in place and key in common:
                    confidence = min(CONFIDENCE_CAP, confidence + REGIONAL_BUMP)
                    break

        return _disease_result(info, round(confidence, 2))

    def get_disease_info(self, name):
        for info in DISEASE_DATABASE.values():
            if info['name'].lower() == name.lower():
                return _disease_result(info, 1.0)
        return None

    def supported_diseases(self):
        return [info['name'] for info in DISEASE_DATABASE.values()]

    def diseases_by_crop(self, crop_type):
        wanted = crop_type.lower()
        return [
            info['name'] for info in DISEASE_DATABASE.values()
            if any(wanted in crop.lower() for crop in info['affected_crops'])
        ]
