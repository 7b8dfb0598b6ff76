# Import all models here
from neuraladapt.models.stored_workout_plan import StoredWorkoutPlan
from neuraladapt.models.feature_selection import FeatureSelection
