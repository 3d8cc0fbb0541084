from rest_framework import serializers

from .models import Topic, ClassTest, Progress, ProgressWeek


class TopicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Topic
        fields = ['id', 'name', 'content', 'year', 'term_label', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']


class ClassTestSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClassTest
        fields = ['id', 'name', 'year', 'term_label', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']


class ProgressWeekSerializer(serializers.ModelSerializer):
    topic_names = serializers.SlugRelatedField(source='topics', slug_field='name', many=True, read_only=True)
    test_name = serializers.CharField(source='test.name', read_only=True, default=None)

    class Meta:
        model = ProgressWeek
        fields = ['week', 'topics', 'topic_names', 'test', 'test_name', 'comments']


class ProgressSerializer(serializers.ModelSerializer):
    term_name = serializers.CharField(source='term.name', read_only=True)
    weeks = ProgressWeekSerializer(many=True, read_only=True)

    class Meta:
        model = Progress
        fields = ['id', 'name', 'term', 'term_name', 'year', 'weeks', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ProgressWeekUpdateSerializer(serializers.Serializer):
    topics = serializers.PrimaryKeyRelatedField(queryset=Topic.objects.all(), many=True, required=False)
    test = serializers.PrimaryKeyRelatedField(queryset=ClassTest.objects.all(), required=False, allow_null=True)
    comments = serializers.CharField(required=False, allow_blank=True)
